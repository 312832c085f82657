"""Annotated proof -> verifier input.

Stages, in order:
1. Parse the annotated proof (verifier_input.proof)
2. Build memory pages and their hashes (verifier_input.memory_pages)
3. Assemble the public input without page products (verifier_input.public_input)
4. Derive z and alpha from annotations, cross-checked by PRNG replay (verifier_input.interaction)
5. Append the page products
6. Build task metadata from the fact topologies (verifier_input.task_metadata)
7. Encode and write the document (verifier_input.encoder)
"""

import logging
from typing import Optional, Sequence

from cairo_primitives.keccak import hash_words
from verifier_input.config import CodecConfig
from verifier_input.encoder import VerifierInput, write_verifier_input
from verifier_input.interaction import derive_interaction_elements
from verifier_input.memory_pages import build_memory_page_facts
from verifier_input.proof import AnnotatedProof, load_annotated_proof, proof_params_vector
from verifier_input.public_input import append_page_products, public_input_without_products
from verifier_input.task_metadata import FactTopology, build_task_metadata, load_fact_topologies
from verifier_input.tracing import PipelineTracer

logger = logging.getLogger(__name__)


def prepare_verifier_input(
    proof: AnnotatedProof,
    fact_topologies: Optional[Sequence[FactTopology]] = None,
    config: Optional[CodecConfig] = None,
    tracer: Optional[PipelineTracer] = None,
) -> VerifierInput:
    """Compute the verifier input for a parsed proof.

    Args:
        proof: Parsed annotated proof
        fact_topologies: Bootloader fact topologies, None for a plain program
        config: Codec options (defaults to CodecConfig())
        tracer: Checkpoint diagnostics (defaults to PipelineTracer())

    Returns:
        Fully populated VerifierInput

    Raises:
        VerifierInputError: On any malformed field or inconsistent derived value
    """
    config = config or CodecConfig()
    tracer = tracer or PipelineTracer()

    facts = build_memory_page_facts(proof.public_input.public_memory)
    tracer.post_parse(proof, facts)

    proof_words = proof.proof_words
    prefix = public_input_without_products(
        proof, facts, config.n_verifier_friendly_commitment_layers
    )

    elements = derive_interaction_elements(
        proof.annotations,
        prefix,
        proof_words,
        verify=config.verify_challenges,
        max_retries=config.max_challenge_retries,
    )
    tracer.post_challenges(elements, hash_words(prefix))

    public_input = append_page_products(prefix, facts, elements.z, elements.alpha)

    task_metadata = build_task_metadata(
        proof.public_input, fact_topologies, config.bootloader_prefix_threshold
    )

    return VerifierInput(
        proof_params=proof_params_vector(proof.proof_parameters),
        proof=proof_words,
        public_input=public_input,
        z=elements.z,
        alpha=elements.alpha,
        memory_page_facts=facts,
        task_metadata=task_metadata.words,
        task_output_layout=task_metadata.layout.value if task_metadata.layout else None,
    )


def prepare_verifier_input_file(
    annotated_proof_path: str,
    output_path: str,
    fact_topologies_path: Optional[str] = None,
    config: Optional[CodecConfig] = None,
    tracer: Optional[PipelineTracer] = None,
) -> VerifierInput:
    """Read an annotated proof, compute the verifier input and write it as JSON."""
    tracer = tracer or PipelineTracer()

    logger.info("Preparing input from %s", annotated_proof_path)
    proof = load_annotated_proof(annotated_proof_path)

    fact_topologies = None
    if fact_topologies_path is not None:
        fact_topologies = load_fact_topologies(fact_topologies_path)
        logger.info("Loaded %d fact topologies from %s", len(fact_topologies), fact_topologies_path)

    vi = prepare_verifier_input(proof, fact_topologies, config, tracer)

    tracer.pre_serialize(vi)
    write_verifier_input(vi, output_path)
    logger.info("Verifier input written to %s", output_path)
    return vi
