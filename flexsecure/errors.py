from fastapi import status

class BaseAppException(Exception):
    def __init__(self, code: str, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

class ConfigError(BaseAppException):
    def __init__(self, message: str):
        super().__init__("CONFIG_ERROR", message, status.HTTP_500_INTERNAL_SERVER_ERROR)

class InternalServerError(BaseAppException):
    def __init__(self, message: str = "internal error"):
        super().__init__("INTERNAL_ERROR", message, status.HTTP_500_INTERNAL_SERVER_ERROR)


# --- Codec errors ---
# Messages are fixed strings: never interpolate plaintext, envelopes or keys.

class SecureCodecError(BaseAppException):
    code = "CODEC_ERROR"
    default_message = "codec error"
    http_status_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str | None = None):
        super().__init__(self.code, message or self.default_message, self.http_status_default)

class InvalidKeyError(SecureCodecError):
    code = "INVALID_KEY"
    default_message = "encryption key is empty or has an invalid length"
    http_status_default = status.HTTP_500_INTERNAL_SERVER_ERROR

class EmptyInputError(SecureCodecError):
    code = "EMPTY_INPUT"
    default_message = "plaintext cannot be empty"

class MalformedInputError(SecureCodecError):
    code = "MALFORMED_INPUT"
    default_message = "invalid ciphertext"

class AuthenticationFailedError(SecureCodecError):
    code = "AUTHENTICATION_FAILED"
    default_message = "authentication tag verification failed"

class DecryptionFailedError(SecureCodecError):
    code = "DECRYPTION_FAILED"
    default_message = "decryption failed"
