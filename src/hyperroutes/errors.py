"""Errors raised while parsing a hyper-schema into routes.

Every error aborts the whole parse; there is no partial result.
"""


class HyperSchemaError(Exception):
    """Base class for all parsing errors."""


class InvalidSchemaError(HyperSchemaError):
    """A structural problem in the schema document."""

    def __init__(self, schema, msg: str):
        self.schema = schema
        self.msg = msg
        super().__init__(msg)


class InvalidSchemaRefError(HyperSchemaError):
    """A $ref (or path variable pointer) that cannot be resolved."""

    def __init__(self, ref: str, msg: str):
        self.ref = ref
        self.msg = msg
        super().__init__(f'invalid $ref "{ref}": {msg}')


class CyclicReferenceError(InvalidSchemaRefError):
    """A $ref which leads back to itself."""

    def __init__(self, ref: str, chain: list[str]):
        self.chain = list(chain)
        super().__init__(ref, "cyclic reference: " + " -> ".join([*chain, ref]))


class TypeRedefinitionError(HyperSchemaError):
    """Two types share a name but not a definition."""

    def __init__(self, name: str, first, redefs: list):
        self.name = name
        self.first = first
        self.redefs = list(redefs)
        super().__init__(f"type {name} defined multiple times")


class MalformedTemplateError(HyperSchemaError):
    """An href which is not a valid URI template."""

    def __init__(self, href: str, msg: str):
        self.href = href
        self.msg = msg
        super().__init__(f"{href!r}: {msg}")
