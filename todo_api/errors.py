class TodoAppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TodoAppError):
    status_code = 400


class NotFoundError(TodoAppError):
    status_code = 404


class StorageError(TodoAppError):
    status_code = 500


class StorageConnectionError(StorageError):
    pass


class QueryError(StorageError):
    pass
