"""Error taxonomy shared by services and routers.

Every error is an ``HTTPException`` so a service can raise it directly and the
router surfaces it unchanged. ``code`` is a stable machine-readable tag added
to the JSON body by the handler installed in ``negosyo.main``.
"""

from fastapi import HTTPException, status


class NegosyoError(HTTPException):
    code = "error"

    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(NegosyoError):
    """Bad input or a failed workflow guard. Raised before any side effect."""

    code = "validation_error"

    def __init__(self, detail: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


class TemplateConfigError(ValidationError):
    """Unknown template name or variant id."""

    code = "template_config_error"


class UnauthorizedError(NegosyoError):
    code = "unauthorized"

    def __init__(self, detail: str = "Invalid or missing authentication"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)


class PermissionDeniedError(NegosyoError):
    code = "permission_denied"

    def __init__(self, detail: str = "Not allowed to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class NotFoundError(NegosyoError):
    code = "not_found"

    def __init__(self, kind: str, obj_id: str):
        self.kind = kind
        self.obj_id = obj_id
        super().__init__(status.HTTP_404_NOT_FOUND, f"{kind} {obj_id} not found")


class ConflictError(NegosyoError):
    code = "conflict"

    def __init__(self, detail: str):
        super().__init__(status.HTTP_409_CONFLICT, detail)


class AlreadyPaidError(ConflictError):
    code = "already_paid"

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} is already paid")


class UpstreamError(NegosyoError):
    """A call to an external collaborator failed or timed out."""

    code = "upstream_error"

    def __init__(self, service: str, detail: str, *, timeout: bool = False):
        self.service = service
        self.timeout = timeout
        if timeout:
            self.code = "upstream_timeout"
        super().__init__(status.HTTP_502_BAD_GATEWAY, f"{service}: {detail}")


class ConsistencyError(NegosyoError):
    """An internal invariant would be violated; the operation is aborted."""

    code = "consistency_error"

    def __init__(self, detail: str):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
