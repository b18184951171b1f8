# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2024/10/12 21:40:07
# @Author : Kariko Lin

from enum import StrEnum


class SlopMark(StrEnum):
    STRING_KV = '='
    LIST_OPEN = '{'
    LIST_CLOSE = '}'
    COMMENT = '#'


# a key with any of them can't be written back.
KEY_FORBIDDEN = (SlopMark.STRING_KV, SlopMark.LIST_OPEN, '\n')

PRETTY_INDENT = 4

# `chardet` is not that reliable on short files.
CODEC_CONFIDENCE = 0.8
CODEC_FALLBACKS = ('utf-8', 'gbk')
