# Error taxonomy shared by the services and the JSON error handlers


class ApiError(Exception):
    """Base error rendered as ``{"actionResult": ...}`` by the app's error handler."""
    status_code = 500
    action_result = 'ERR_INTERNAL_ERROR'

    def __init__(self, message=None, action_result=None):
        super().__init__(message or action_result or self.action_result)
        if action_result is not None:
            self.action_result = action_result

    def to_dict(self):
        return {"actionResult": self.action_result}


class ValidationError(ApiError):
    status_code = 400
    action_result = 'ERR_INVALID_PROPERTIES'

    def __init__(self, invalid_properties, message=None):
        self.invalid_properties = list(invalid_properties)
        super().__init__(message or f"Invalid properties: {', '.join(self.invalid_properties)}")

    def to_dict(self):
        return {
            "actionResult": self.action_result,
            "invalidProperties": self.invalid_properties
        }


class NotFoundError(ApiError):
    """Unknown entity, reported under the property that referenced it."""
    status_code = 404
    action_result = 'ERR_INVALID_PROPERTIES'

    def __init__(self, invalid_properties):
        self.invalid_properties = list(invalid_properties)
        super().__init__(f"Not found: {', '.join(self.invalid_properties)}")

    def to_dict(self):
        return {
            "actionResult": self.action_result,
            "invalidProperties": self.invalid_properties
        }


class ConflictError(ApiError):
    # Toggle protocol outcomes (duplicate like, unlike of a non-liked entity, ...)
    status_code = 400

    def __init__(self, action_result):
        super().__init__(action_result=action_result)


class PermissionDeniedError(ApiError):
    status_code = 403
    action_result = 'ERR_INSUFFICIENT_PERMS'


class InactiveAccountError(ApiError):
    status_code = 401
    action_result = 'ERR_INACTIVE_USER'


class InternalError(ApiError):
    status_code = 500
    action_result = 'ERR_INTERNAL_ERROR'
