"""
Learner Trust Pipeline

Identity verification (e-KYC), signed achievement credentials and a PII
access audit trail for a vocational training platform.

Trust guarantees:
- A learner is "identity verified" only after every e-KYC stage passed
- A stored credential is always signed; the signature covers the stored bytes
- At most one ACTIVE credential per learner and achievement
- Auditing never changes the outcome of the operation it observes
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
