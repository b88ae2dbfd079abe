from enum import Flag


class MediaType:
    """Media types handled out of the box."""

    NONE = ""
    JSON = "application/json"
    XML = "application/xml"
    FORM_DATA = "multipart/form-data"
    FORM_URL_ENCODED = "application/x-www-form-urlencoded"
    # not an HTTP media type: the body goes to the query string
    QUERY_STRING = "@query"


class NonStandardBodyMethods(Flag):
    """Methods allowed to carry a body although HTTP does not define one."""

    NONE = 0
    GET = 1
    DELETE = 2
    ALL = GET | DELETE

    def allows(self, method: str) -> bool:
        member = NonStandardBodyMethods.__members__.get(method.upper())
        return member is not None and member is not NonStandardBodyMethods.NONE and member in self
