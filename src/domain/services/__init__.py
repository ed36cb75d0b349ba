"""Domain services for the learner trust pipeline.

Domain services contain business logic that doesn't naturally fit in entities
or value objects. They must not depend on infrastructure.

Available services:
- validate_national_id: Local national ID format check
- build_credential_document / canonicalize: Signed credential payload
"""

from src.domain.services.credential_document import (
    build_alignments,
    build_credential_document,
    canonicalize,
    generate_credential_id,
    generate_serial_number,
    parse_canonical,
    subject_pseudonym,
)
from src.domain.services.national_id import (
    NATIONAL_ID_FORMAT_TAG,
    NationalIdFormat,
    normalize_name,
    validate_national_id,
)

__all__ = [
    "NATIONAL_ID_FORMAT_TAG",
    "NationalIdFormat",
    "build_alignments",
    "build_credential_document",
    "canonicalize",
    "generate_credential_id",
    "generate_serial_number",
    "normalize_name",
    "parse_canonical",
    "subject_pseudonym",
    "validate_national_id",
]
