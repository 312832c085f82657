"""
End-to-end verifier input preparation.

Builds a small synthetic annotated proof whose annotations carry z and alpha
derived by an independent reference replay of the verifier PRNG, runs the
whole pipeline and checks every output vector.
"""

import json
import logging

import pytest

from cairo_primitives.field import CAIRO_PRIME
from tests.fixtures import (
    annotated_document,
    annotation_lines,
    expected_prefix,
    ref_product,
    ref_replay,
)
from verifier_input.__main__ import main
from verifier_input.config import CodecConfig
from verifier_input.errors import ChallengeMismatch
from verifier_input.prepare import prepare_verifier_input, prepare_verifier_input_file
from verifier_input.proof import parse_annotated_proof
from verifier_input.task_metadata import FactTopology
from verifier_input.tracing import PipelineTracer


class RecordingTracer(PipelineTracer):
    """Records the checkpoints it was called at."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def post_parse(self, proof, facts):
        self.calls.append("post_parse")

    def post_challenges(self, elements, public_input_hash):
        self.calls.append("post_challenges")

    def pre_serialize(self, vi):
        self.calls.append("pre_serialize")


# =============================================================================
# In-memory pipeline
# =============================================================================

class TestPrepareVerifierInput:

    def test_vectors(self, annotated_proof):
        vi = prepare_verifier_input(annotated_proof)
        prefix = expected_prefix()
        z, alpha = ref_replay(prefix, annotated_proof.proof_words)

        assert (vi.z, vi.alpha) == (z, alpha)
        assert vi.proof == annotated_proof.proof_words
        assert vi.proof_params == [18, 2, 24, 6, 3, 0, 4, 3]
        assert vi.public_input == prefix + [
            ref_product([(1, 5), (2, 7)], z, alpha),
            ref_product([(10, 0xA), (12, 0xC)], z, alpha),
        ]
        assert vi.task_metadata == [0]
        assert vi.task_output_layout is None

    def test_without_annotations_matches(self, proof, annotated_proof):
        assert prepare_verifier_input(proof).public_input == (
            prepare_verifier_input(annotated_proof).public_input
        )

    def test_wrong_annotation_fails(self):
        doc = annotated_document()
        z, alpha = ref_replay(expected_prefix(), parse_annotated_proof(doc).proof_words)
        doc["annotations"] = annotation_lines((z + 1) % CAIRO_PRIME, alpha)
        with pytest.raises(ChallengeMismatch):
            prepare_verifier_input(parse_annotated_proof(doc))

    def test_wrong_annotation_trusted_without_verification(self):
        doc = annotated_document()
        doc["annotations"] = annotation_lines(5, 6)
        vi = prepare_verifier_input(
            parse_annotated_proof(doc), config=CodecConfig(verify_challenges=False)
        )
        assert (vi.z, vi.alpha) == (5, 6)
        assert vi.public_input[-1] == ref_product([(10, 0xA), (12, 0xC)], 5, 6)

    def test_override_changes_seed(self, proof):
        default = prepare_verifier_input(proof)
        overridden = prepare_verifier_input(
            proof, config=CodecConfig(n_verifier_friendly_commitment_layers=7)
        )
        assert overridden.public_input[0] == 7
        assert overridden.z != default.z

    def test_tracer_checkpoints(self, annotated_proof):
        tracer = RecordingTracer()
        prepare_verifier_input(annotated_proof, tracer=tracer)
        assert tracer.calls == ["post_parse", "post_challenges"]

    def test_default_tracer_logs(self, annotated_proof, caplog):
        with caplog.at_level(logging.INFO, logger="verifier_input.pipeline"):
            prepare_verifier_input(annotated_proof)
        assert "Public input hash" in caplog.text

    def test_fact_topologies_need_output(self, proof):
        # Output segment address 11 is not in public memory.
        with pytest.raises(ValueError):
            prepare_verifier_input(proof, [FactTopology(tree_structure=(1, 0))])


# =============================================================================
# Files and command line
# =============================================================================

@pytest.fixture
def proof_file(tmp_path):
    path = tmp_path / "annotated_proof.json"
    path.write_text(json.dumps(annotated_document()))
    return path


class TestPrepareFile:

    def test_writes_document(self, proof_file, tmp_path):
        out = tmp_path / "input.json"
        tracer = RecordingTracer()
        vi = prepare_verifier_input_file(str(proof_file), str(out), tracer=tracer)

        j = json.loads(out.read_text())
        assert j["z"] == hex(vi.z)
        assert j["public_input"] == [hex(v) for v in vi.public_input]
        assert j["memory_page_facts"]["continuous_pages"][0]["values"] == ["0xa", "0x0", "0xc"]
        assert tracer.calls == ["post_parse", "post_challenges", "pre_serialize"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            prepare_verifier_input_file(str(tmp_path / "nope.json"), str(tmp_path / "input.json"))


class TestCommandLine:

    def test_prepare(self, proof_file, tmp_path):
        out = tmp_path / "input.json"
        assert main(["prepare", str(proof_file), "-o", str(out)]) == 0
        assert "public_input" in json.loads(out.read_text())

    def test_prepare_error_exit_code(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{}")
        assert main(["prepare", str(bad), "-o", str(tmp_path / "input.json")]) == 1
        assert not (tmp_path / "input.json").exists()

    def test_fri_steps(self, capsys):
        assert main(["fri-steps", "--n-steps", "32768", "--degree-bound", "64"]) == 0
        assert json.loads(capsys.readouterr().out) == [0, 4, 4, 4, 1]

    def test_fri_steps_from_public_input(self, tmp_path, capsys):
        path = tmp_path / "public_input.json"
        path.write_text(json.dumps({"n_steps": 1024}))
        assert main(["fri-steps", "--public-input", str(path), "--degree-bound", "64"]) == 0
        assert json.loads(capsys.readouterr().out) == [0, 4, 4]

    def test_fri_steps_needs_input(self):
        assert main(["fri-steps", "--degree-bound", "64"]) == 1
