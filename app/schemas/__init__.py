from app.schemas.registration import (
    RegistrationBase,
    RegistrationCreate,
    RegistrationResponse,
    RegistrationResult,
    MessageResponse,
    ResponseModel
)

__all__ = [
    'RegistrationBase',
    'RegistrationCreate',
    'RegistrationResponse',
    'RegistrationResult',
    'MessageResponse',
    'ResponseModel'
]
