"""Builders for synthetic annotated proofs.

The ref_* helpers compute hashes, PRNG draws and products with pycryptodome
and plain integers, without the package primitives.
"""

import copy

from Crypto.Hash import keccak

P = 0x800000000000011000000000000000000000000000000000000000000000001
R_INV = 0x40000000000001100000000000012100000000000000000000000000000000

PROOF_HEX = "0x" + "ab" * 40  # 40 bytes -> padded to two words
TRACE_COMMITMENT = int("ab" * 32, 16)


# --- Reference Hashing ---

def ref_keccak(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def ref_word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def ref_hash_words(values) -> int:
    return int.from_bytes(ref_keccak(b"".join(ref_word(v) for v in values)), "big")


def ref_replay(public_input_words, proof_words, n: int = 2) -> list[int]:
    """Verifier PRNG: seed, mix the trace commitment, draw n elements."""
    digest = ref_keccak(b"".join(ref_word(v) for v in public_input_words))
    counter = 0
    if proof_words:
        bumped = (int.from_bytes(digest, "big") + 1) % 2**256
        digest = ref_keccak(ref_word(bumped) + ref_word(proof_words[0]))
    out = []
    for _ in range(n):
        while int.from_bytes(digest, "big") >= 31 * P:
            digest = ref_keccak(digest + ref_word(counter))
            counter += 1
        out.append(int.from_bytes(digest, "big") * R_INV % P)
        digest = ref_keccak(digest + ref_word(counter))
        counter += 1
    return out


def ref_product(cells, z: int, alpha: int) -> int:
    prod = 1
    for addr, value in cells:
        prod = prod * ((z - (addr + alpha * value)) % P) % P
    return prod


def format_interaction_element(index: int, value: int) -> str:
    """Interaction element line as the stone verifier logs it."""
    return f"V->P: /cpu air/STARK/Interaction: Interaction element #{index}: Field Element(0x{value:x})"


# --- Documents ---

PUBLIC_MEMORY = [
    {"page": 0, "address": 1, "value": "0x5"},
    {"page": 0, "address": "2", "value": "0x7"},
    {"page": 1, "address": 10, "value": "0xa"},
    {"page": 1, "address": "12", "value": "0xc"},
]

MEMORY_SEGMENTS = {
    "program": {"begin_addr": 1, "stop_ptr": 3},
    "execution": {"begin_addr": 20, "stop_ptr": 40},
    "output": {"begin_addr": 10, "stop_ptr": 13},
}

PROOF_PARAMETERS = {
    "stark": {
        "log_n_cosets": 2,
        "fri": {
            "n_queries": 18,
            "proof_of_work_bits": 24,
            "last_layer_degree_bound": 64,
            "fri_step_list": [0, 4, 3],
        },
    },
}


def make_document(
    public_memory=None,
    memory_segments=None,
    proof_hex: str = PROOF_HEX,
    annotations=None,
    n_steps: int = 16,
    layout: str = "starknet",
    n_verifier_friendly_commitment_layers=None,
) -> dict:
    """A small, fully valid annotated proof document."""
    params = copy.deepcopy(PROOF_PARAMETERS)
    if n_verifier_friendly_commitment_layers is not None:
        params["n_verifier_friendly_commitment_layers"] = n_verifier_friendly_commitment_layers
    return {
        "annotations": list(annotations or []),
        "proof_hex": proof_hex,
        "public_input": {
            "n_steps": n_steps,
            "rc_min": 0,
            "rc_max": 100,
            "layout": layout,
            "memory_segments": copy.deepcopy(memory_segments or MEMORY_SEGMENTS),
            "public_memory": copy.deepcopy(public_memory or PUBLIC_MEMORY),
        },
        "proof_parameters": params,
    }


def expected_prefix() -> list[int]:
    """Public input without products for make_document() defaults."""
    return [
        0,                                         # verifier-friendly layers
        4,                                         # log2(16)
        0, 100,                                    # rc_min, rc_max
        int.from_bytes(b"starknet", "big"),        # layout
        1, 3, 20, 40, 10, 13,                      # program, execution, output
        1, 5,                                      # padding cell
        2,                                         # n_pages
        2, ref_hash_words([1, 5, 2, 7]),           # page 0: size, hash
        10, 3, ref_hash_words([0xA, 0, 0xC]),      # page 1: start, size, hash
    ]


def annotation_lines(z: int, alpha: int) -> list[str]:
    """Annotations carrying z and alpha among unrelated transcript lines."""
    return [
        f"P->V[0:32]: /cpu air/STARK/Original/Commit on Trace: Hash(0x{TRACE_COMMITMENT:064x})",
        format_interaction_element(0, z),
        format_interaction_element(1, alpha),
        "P->V[32:64]: /cpu air/STARK/Interaction/Commit on Trace: Hash(0x00)",
    ]


def annotated_document(**kwargs) -> dict:
    """make_document() whose annotations carry the correctly replayed z and alpha."""
    proof_words = [TRACE_COMMITMENT, int("ab" * 8 + "00" * 24, 16)]
    z, alpha = ref_replay(expected_prefix(), proof_words)
    return make_document(annotations=annotation_lines(z, alpha), **kwargs)
