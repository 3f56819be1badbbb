class GreenButtonError(Exception): ...


class SchemaError(GreenButtonError): ...


class ClassificationError(SchemaError): ...


class LinkageError(GreenButtonError): ...


class MissingReadingTypeError(LinkageError): ...


class InvalidDstRuleError(GreenButtonError): ...


class ColumnarError(GreenButtonError): ...


class MissingFieldError(ColumnarError):
    def __init__(self, field: str, store: str):
        super().__init__(f"Missing '{field}' for {store}")
        self.field = field
        self.store = store


class EncodingError(GreenButtonError): ...


def require(condition: bool, message: str, exc: type[GreenButtonError] = GreenButtonError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
