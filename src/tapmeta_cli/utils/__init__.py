"""Utility modules for tapmeta."""

from .console import (
    _rich_success,
    _rich_error,
    _rich_warning,
    _rich_info,
    _rich_echo,
    _create_key_value_table,
    _get_console,
    _plain_echo,
    STATUS_SYMBOLS
)

__all__ = [
    '_rich_success',
    '_rich_error',
    '_rich_warning',
    '_rich_info',
    '_rich_echo',
    '_create_key_value_table',
    '_get_console',
    '_plain_echo',
    'STATUS_SYMBOLS'
]
