from fastapi import HTTPException, status

# Domain errors carry a fixed status code so services can raise them directly
# and FastAPI renders them as {"detail": ...}.


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "You are not allowed to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidState(HTTPException):
    def __init__(self, detail: str = "Action not allowed in the current state"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "The record was changed by another request"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InsufficientBalance(HTTPException):
    def __init__(self, detail: str = "Insufficient vacation balance"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class BadRequest(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
