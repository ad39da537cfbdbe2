import abc


class JSONAPIGraphException(Exception, metaclass=abc.ABCMeta):
    pass


class InvalidStructureError(JSONAPIGraphException):
    message: str

    def __str__(self):
        return self.message

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
