from ._base import ContentTranslator, HttpContent, ResponseDeserializer
from ._buffer import buffer_content, is_buffer_content
from ._form import FormDataTranslator, FormUrlEncodedTranslator
from ._json import JsonTranslator
from ._query_string import QueryStringTranslator
from ._registry import (
    TranslatorRegistry,
    default_translators,
    register_default_translator,
)
from ._xml import XmlTranslator

__all__ = [
    "ContentTranslator",
    "FormDataTranslator",
    "FormUrlEncodedTranslator",
    "HttpContent",
    "JsonTranslator",
    "QueryStringTranslator",
    "ResponseDeserializer",
    "TranslatorRegistry",
    "XmlTranslator",
    "buffer_content",
    "default_translators",
    "is_buffer_content",
    "register_default_translator",
]
