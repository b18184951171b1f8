# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/10/12 21:52:31
# @Author : Kariko Lin

"""
SLOP document model: an *ordered* key-value mapping,
whose values are either a one-line string or a list of lines.

Text <-> model conversion lives in `pyslop.parser`.
"""

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from .consts import KEY_FORBIDDEN, PRETTY_INDENT, SlopMark


class SlopError(Exception):
    """Base of all errors raised by pyslop."""
    pass


class InvalidKey(SlopError, ValueError):
    """The key would produce an invalid (or different) SLOP file."""
    def __init__(self, key: str) -> None:
        super().__init__(f'the key `{key}` contains invalid characters')
        self.key = key


class InvalidValue(SlopError, ValueError):
    """The value can't be written as SLOP and read back unchanged."""
    def __init__(self, key: str, value: str, reason: str) -> None:
        super().__init__(f'value `{value!r}` of `{key}` {reason}')
        self.key = key
        self.value = value


@dataclass
class SlopString:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class SlopList:
    items: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[str]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


SlopValue = SlopString | SlopList


def to_value(value: SlopValue | str | Iterable[str]) -> SlopValue:
    """将`str`、字符串序列等包装成`SlopValue`。已经包装好的原样返回。"""
    if isinstance(value, (SlopString, SlopList)):
        return value
    if isinstance(value, str):
        return SlopString(value)
    return SlopList([str(i) for i in value])


def _check_key(key: str) -> None:
    if not key or any(i in key for i in KEY_FORBIDDEN):
        raise InvalidKey(key)
    # would be read as a comment, or lose its leading blanks.
    if key[0] == SlopMark.COMMENT or key[0].isspace():
        raise InvalidKey(key)


def _check_line(key: str, line: str) -> None:
    if '\n' in line:
        raise InvalidValue(key, line, 'spans multiple lines')
    if line.endswith('\r'):
        raise InvalidValue(key, line, 'ends with a carriage return')


def _check_value(key: str, value: SlopValue) -> None:
    if isinstance(value, SlopString):
        _check_line(key, value.value)
        return
    for i in value.items:
        _check_line(key, i)
        if i.lstrip() == SlopMark.LIST_CLOSE:
            raise InvalidValue(key, i, 'would close the list early')


class SlopDocument(MutableMapping[str, SlopValue]):
    """A parsed SLOP file (or string) loaded into memory.

    Keys keep the order they were first inserted in;
    overwriting a key replaces its value *in place*. Reading

        ```
        a=1
        b=2
        a=3
        ```

    iterates as `a, b`, with `a` holding `3`.

    Use `get_string()` / `get_list()` to narrow values to one kind.
    """
    def __init__(
        self,
        pairs: Mapping[str, SlopValue | str | list[str]] | None = None
    ) -> None:
        self.__raw: dict[str, SlopValue] = {}
        if pairs:
            for k, v in pairs.items():
                self.insert(k, v)

    @classmethod
    def from_text(cls, text: str) -> 'SlopDocument':
        """Parse a whole SLOP string into a new document."""
        from .parser import parse
        return parse(text)

    def __getitem__(self, key: str) -> SlopValue:
        return self.__raw[key]

    def __setitem__(
        self, key: str, value: SlopValue | str | list[str]
    ) -> None:
        self.insert(key, value)

    def __delitem__(self, key: str) -> None:
        del self.__raw[key]

    def __contains__(self, key: object) -> bool:
        return key in self.__raw

    def __iter__(self) -> Iterator[str]:
        return iter(self.__raw)

    def __len__(self) -> int:
        return len(self.__raw)

    def __eq__(self, other: object) -> bool:
        # order matters for SLOP documents, unlike plain Mappings.
        if not isinstance(other, SlopDocument):
            return NotImplemented
        return list(self.__raw.items()) == list(other.__raw.items())

    def __repr__(self) -> str:
        return 'SlopDocument { .cnt = %d }' % len(self)

    def __str__(self) -> str:
        return self.dumps()

    def is_empty(self) -> bool:
        return not self.__raw

    def get(self, key: str, default: SlopValue | None = None) \
            -> SlopValue | None:
        return self.__raw.get(key, default)

    def get_string(self, key: str) -> str | None:
        """获取字符串值。键不存在，或对应的是列表时，返回`None`。"""
        if isinstance(value := self.__raw.get(key), SlopString):
            return value.value
        return None

    def get_list(self, key: str) -> list[str] | None:
        """获取列表值。键不存在，或对应的是字符串时，返回`None`。"""
        if isinstance(value := self.__raw.get(key), SlopList):
            return value.items
        return None

    def get_as[R](
        self, key: str, converter: Callable[[str], R], default: R | None = None
    ) -> R | None:
        """Convert a string value, e.g. `doc.get_as('width', int)`.

        List values are treated as missing. Errors raised by `converter`
        are NOT caught.
        """
        if (value := self.get_string(key)) is None:
            return default
        return converter(value)

    def insert(
        self, key: str, value: SlopValue | str | Iterable[str]
    ) -> SlopValue | None:
        """Insert or overwrite `key`, returning the previous value.

        Raises `InvalidKey` for empty keys and keys containing `=`, `{`
        or newlines (or starting with `#` or blanks), and `InvalidValue`
        for values that can't be read back unchanged.
        """
        _check_key(key)
        value = to_value(value)
        _check_value(key, value)
        return self.insert_unchecked(key, value)

    def insert_unchecked(
        self, key: str, value: SlopValue | str | Iterable[str]
    ) -> SlopValue | None:
        """Same as `insert()`, but without any validation.

        Only use it when the key is known to be valid.
        """
        prev = self.__raw.get(key)
        self.__raw[key] = to_value(value)
        return prev

    def remove(self, key: str) -> SlopValue | None:
        return self.__raw.pop(key, None)

    def update_from_text(self, text: str) -> None:
        """解析 SLOP 文本，并把结果合并进当前文档（同名键覆盖）。

        注：解析出错时当前文档*不会*被改动。
        """
        from .parser import parse_into
        parse_into(text, self)

    def dumps(self, indent: int = 0) -> str:
        """Serialize to a SLOP string.

        `indent > 0` indents list items for humans; note the blanks
        become part of the items when read back.
        """
        from .parser import serialize
        return serialize(self, indent)

    def dumps_pretty(self) -> str:
        return self.dumps(PRETTY_INDENT)
