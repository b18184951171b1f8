# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2024/10/12 22:16:48
# @Author : Kariko Lin

"""SLOP text <-> `SlopDocument`.

The format is line based:

    ```
    # a comment, only at top level
    some-string-kv=some value # not a comment
    some-list-kv{
        item 1
        item 2
    }
    ```

Lines are read *once* by a two-state machine (outside / inside a list),
no lookahead, no backtracking. A malformed document is rejected as a whole.
"""

import logging
import warnings
from enum import Enum, auto
from io import StringIO, TextIOBase
from typing import Iterator

import chardet
import yaml

from .abstract import FileHandler
from .consts import CODEC_CONFIDENCE, CODEC_FALLBACKS, SlopMark
from .model import SlopDocument, SlopError, SlopList, SlopString, SlopValue


class SlopParseError(SlopError):
    """Raised when a SLOP string can't be parsed.

    `lineno` is 1-based; `line` is the offending line
    (without the trailing `\\r`, if any).
    """
    reason = 'is not a valid kv'

    def __init__(self, lineno: int, line: str) -> None:
        super().__init__(f'(in line {lineno}) `{line}` {self.reason}')
        self.lineno = lineno
        self.line = line


class EmptyKey(SlopParseError):
    reason = 'has an empty key'


class InvalidLine(SlopParseError):
    reason = 'is neither a string kv nor a list kv'


class MalformedListOpen(SlopParseError):
    reason = 'has trailing characters after `{`'


class UnterminatedList(SlopParseError):
    """Holds the line that *opens* the list."""
    reason = 'is not closed'


class SlopYamlError(SlopError):
    """The YAML file is not a flat mapping of strings and string lists."""
    pass


class ParserState(Enum):
    OUTSIDE = auto()
    INSIDE = auto()


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith('\r') else line


def iter_pairs(text: str) -> Iterator[tuple[str, SlopValue]]:
    """Yield `(key, value)` pairs in the order they appear in `text`.

    Duplicated keys are yielded as is; it's up to the caller to merge them.
    Raises a `SlopParseError` as soon as a bad line is met.
    """
    state = ParserState.OUTSIDE
    key, items = '', []
    opened = (0, '')
    for lineno, raw in enumerate(text.split('\n'), 1):
        line = _strip_cr(raw)

        if state is ParserState.INSIDE:
            # every line counts in a list, even blanks and `#`s.
            if line.lstrip() == SlopMark.LIST_CLOSE:
                logging.debug('list kv `%s` closed at line %d', key, lineno)
                yield key, SlopList(items)
                state = ParserState.OUTSIDE
            else:
                items.append(line)
            continue

        effective = line.lstrip()
        if not effective or effective.startswith(SlopMark.COMMENT):
            continue

        eq = effective.find(SlopMark.STRING_KV)
        br = effective.find(SlopMark.LIST_OPEN)
        if eq >= 0 and (br < 0 or eq < br):
            if eq == 0:
                raise EmptyKey(lineno, line)
            yield effective[:eq], SlopString(effective[eq + 1:])
        elif br >= 0:
            if br != len(effective) - 1:
                raise MalformedListOpen(lineno, line)
            if br == 0:
                raise EmptyKey(lineno, line)
            key, items = effective[:br], []
            opened = (lineno, line)
            state = ParserState.INSIDE
            logging.debug('list kv `%s` opened at line %d', key, lineno)
        else:
            raise InvalidLine(lineno, line)

    if state is ParserState.INSIDE:
        raise UnterminatedList(*opened)


def parse(text: str) -> SlopDocument:
    """Parse a whole SLOP string into a new `SlopDocument`.

    Empty text gives an empty document.
    """
    ret = SlopDocument()
    for k, v in iter_pairs(text):
        # parsed keys are always valid; values are kept verbatim.
        ret.insert_unchecked(k, v)
    return ret


def parse_into(text: str, instance: SlopDocument) -> SlopDocument:
    """把`text`解析的结果合并进`instance`，同名键就地覆盖。

    先完整解析再合并：出错时`instance`保持原样。
    """
    for k, v in parse(text).items():
        instance.insert_unchecked(k, v)
    return instance


def serialize(instance: SlopDocument, indent: int = 0) -> str:
    """Write `instance` back as SLOP, in iteration order.

    `parse(serialize(doc)) == doc` holds for `indent=0`.
    With `indent > 0` list items are prefixed with that many spaces.
    """
    pad = ' ' * indent
    ret: list[str] = []
    for k, v in instance.items():
        if isinstance(v, SlopString):
            ret.append(f'{k}{SlopMark.STRING_KV}{v.value}\n')
            continue
        ret.append(f'{k}{SlopMark.LIST_OPEN}\n')
        ret.extend(f'{pad}{i}\n' for i in v.items)
        ret.append(f'{SlopMark.LIST_CLOSE}\n')
    return ''.join(ret)


class SlopParser(FileHandler[SlopDocument]):
    """Reads / writes one `.slop` file."""

    @staticmethod
    def readstream(buf: TextIOBase) -> SlopDocument:
        """读取解码好的字符串流。

        如没有特殊需求，直接调用`self.read()`便是。
        """
        return parse(buf.read())

    @staticmethod
    def _decode_file(filename: str) -> StringIO:
        with open(filename, 'rb') as fp:
            raw = fp.read()

        codec = chardet.detect(raw)
        if (
            codec is None or codec['encoding'] is None
            or codec['confidence'] < CODEC_CONFIDENCE
        ):
            codec = {'encoding': CODEC_FALLBACKS[0]}

        # fallbacks
        try:
            buf = raw.decode(codec['encoding'])
        except UnicodeDecodeError:
            logging.warning(
                f'`{filename}` 无法以 {codec["encoding"]} 解码，'
                f'改用 {CODEC_FALLBACKS[1]}。')
            buf = raw.decode(CODEC_FALLBACKS[1])
        # keep `\r` for the parser, like `newline=''` does.
        return StringIO(buf, newline='')

    def read(self) -> SlopDocument:
        """读取`SlopParser`实例指定的文件。"""
        try:
            # when encoding is None, `open()` would fallback to system default.
            # and when encoding got wrong,
            # just `UnicodeDecodeError` and fallback to `chardet`.
            with open(self._fn, 'r', encoding=self._codec, newline='') as fp:
                return self.readstream(fp)
        except UnicodeDecodeError:
            logging.warning(f'`{self._fn}` 编码可能有误，尝试自动检测。')
            return self.readstream(self._decode_file(self._fn))

    def write(self, instance: SlopDocument, indent: int = 0) -> None:
        """保存到 SLOP 文件。`indent`见`serialize()`。"""
        with open(self._fn, 'w', encoding=self._codec, newline='') as fp:
            fp.write(serialize(instance, indent))

    def __str__(self) -> str:
        return 'SLOP file: ' + super().__str__()


class SlopYamlParser(FileHandler[SlopDocument]):
    """Exchange a document with a *flat* YAML mapping:

        ```yaml
        some-string-kv: some value
        some-list-kv:
          - item 1
          - item 2
        ```

    Nested mappings (or lists in lists) are rejected,
    as SLOP has nowhere to put them.
    """
    def __init__(self, filename: str, encoding: str = 'utf-8') -> None:
        super().__init__(filename, encoding)

    @staticmethod
    def __to_text(key: str, val: object) -> str:
        if isinstance(val, str):
            return val
        if val is None:
            return ''
        if isinstance(val, (list, dict)):
            raise SlopYamlError(f'`{key}` 的值嵌套过深，SLOP 无法表示。')
        # may there be some numbers or bools considered as non-str.
        warnings.warn(f'YAML 键 "{key}" 的值 {val!r} 不是字符串，已转换。')
        return str(val)

    @staticmethod
    def __to_value(key: str, val: object) -> SlopValue:
        if isinstance(val, list):
            return SlopList(
                [SlopYamlParser.__to_text(key, i) for i in val])
        return SlopString(SlopYamlParser.__to_text(key, val))

    def read(self) -> SlopDocument:
        with open(self._fn, 'r', encoding=self._codec) as fp:
            src = yaml.safe_load(fp)
        ret = SlopDocument()
        if src is None:  # empty file
            return ret
        if not isinstance(src, dict):
            raise SlopYamlError(
                f'`{self._fn}` 的顶层不是键值对，而是 {type(src).__name__}。')
        for k, v in src.items():
            ret.insert(str(k), self.__to_value(str(k), v))
        return ret

    def write(self, instance: SlopDocument) -> None:
        data = {
            k: v.value if isinstance(v, SlopString) else list(v.items)
            for k, v in instance.items()
        }
        with open(self._fn, 'w', encoding=self._codec) as fp:
            yaml.safe_dump(data, fp, sort_keys=False, allow_unicode=True)

    def __str__(self) -> str:
        return 'SLOP as YAML: ' + super().__str__()
