# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/10/12 21:38:15
# @Author : Kariko Lin

"""Sans' Lovely Properties (SLOP): a tiny, human-readable kv format.

    ```python
    from pyslop import parse

    doc = parse('some-key=some value\\nsome-list{\\nitem 1\\n}\\n')
    doc.get_string('some-key')  # 'some value'
    doc.get_list('some-list')   # ['item 1']
    ```
"""

import logging

from .model import (
    InvalidKey,
    InvalidValue,
    SlopDocument,
    SlopError,
    SlopList,
    SlopString,
    SlopValue,
)
from .parser import (
    EmptyKey,
    InvalidLine,
    MalformedListOpen,
    SlopParseError,
    SlopParser,
    SlopYamlError,
    SlopYamlParser,
    UnterminatedList,
    parse,
    parse_into,
    serialize,
)

__all__ = [
    'SlopDocument', 'SlopValue', 'SlopString', 'SlopList',
    'parse', 'parse_into', 'serialize',
    'SlopParser', 'SlopYamlParser',
    'SlopError', 'SlopParseError', 'SlopYamlError',
    'EmptyKey', 'InvalidLine', 'MalformedListOpen', 'UnterminatedList',
    'InvalidKey', 'InvalidValue',
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
