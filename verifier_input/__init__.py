"""Verifier input - annotated Cairo STARK proof to on-chain verifier call arguments."""

from verifier_input.config import CodecConfig
from verifier_input.encoder import VerifierInput, encode_verifier_input, write_verifier_input
from verifier_input.errors import (
    ArithmeticInconsistency,
    ChallengeMismatch,
    MalformedInput,
    MalformedProof,
    TopologyMismatch,
    VerifierInputError,
)
from verifier_input.interaction import (
    InteractionElements,
    derive_interaction_elements,
    replay_interaction_elements,
)
from verifier_input.memory_pages import (
    ContinuousPage,
    MemoryPageFacts,
    RegularPage,
    build_memory_page_facts,
)
from verifier_input.prepare import prepare_verifier_input, prepare_verifier_input_file
from verifier_input.proof import (
    AnnotatedProof,
    load_annotated_proof,
    parse_annotated_proof,
    proof_params_vector,
)
from verifier_input.public_input import (
    append_page_products,
    permutation_product,
    public_input_without_products,
)
from verifier_input.task_metadata import (
    FactTopology,
    OutputLayout,
    TaskMetadata,
    build_task_metadata,
    load_fact_topologies,
)
from verifier_input.tracing import PipelineTracer

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "CodecConfig",
    # Errors
    "VerifierInputError",
    "MalformedInput",
    "MalformedProof",
    "ArithmeticInconsistency",
    "ChallengeMismatch",
    "TopologyMismatch",
    # Parsing
    "AnnotatedProof",
    "parse_annotated_proof",
    "load_annotated_proof",
    "proof_params_vector",
    # Memory pages
    "MemoryPageFacts",
    "RegularPage",
    "ContinuousPage",
    "build_memory_page_facts",
    # Challenges
    "InteractionElements",
    "replay_interaction_elements",
    "derive_interaction_elements",
    # Public input
    "public_input_without_products",
    "append_page_products",
    "permutation_product",
    # Task metadata
    "FactTopology",
    "OutputLayout",
    "TaskMetadata",
    "build_task_metadata",
    "load_fact_topologies",
    # Output
    "VerifierInput",
    "encode_verifier_input",
    "write_verifier_input",
    # Pipeline
    "PipelineTracer",
    "prepare_verifier_input",
    "prepare_verifier_input_file",
]
