"""
Loo Formatter Tests

Covers the pure call formatter:
- Argument classification (primitive / structured / error-like)
- printf substitution, missing arguments, NaN coercion
- Trailing mapping arguments harvested as fields
- Error normalization (code prefix, err block)

Property of Uncompromising Sensors LLC.
"""

import errno
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from loo.formatter import (
    ArgKind, Formatted, classifyArg, errorDetail, errorMessage,
    formatArgs, formatPrintf, toNumber
)


class ErrorLike:
    """Duck-typed error: message + stack, not an exception"""

    def __init__(self, message, stack, code=None):
        self.message = message
        self.stack = stack
        if code is not None:
            self.code = code


# ============================================================================
# Classification
# ============================================================================

class TestClassification:

    @pytest.mark.parametrize("value", ['text', 0, 1.5, None, True, [1, 2], ('a',)])
    def test_primitives(self, value):
        assert classifyArg(value) is ArgKind.PRIMITIVE

    def test_mapping_is_structured(self):
        assert classifyArg({'message': 'x'}) is ArgKind.STRUCTURED

    def test_exception_is_error_like(self):
        assert classifyArg(ValueError('bad')) is ArgKind.ERROR_LIKE

    def test_duck_typed_error_is_error_like(self):
        assert classifyArg(ErrorLike('boom', 'STACK')) is ArgKind.ERROR_LIKE


# ============================================================================
# printf
# ============================================================================

class TestPrintf:

    def test_directives_with_trailing_fields(self):
        """Trailing mappings after the directives become fields"""
        result = formatArgs(('msg %d %s: %j', 1, 'anh', {'a': 1}, {'b': 2}))
        assert result.message == 'msg 1 anh: {"a":1}'
        assert result.fields == {'b': 2}
        assert result.hasMessage is True

    def test_missing_arguments_left_verbatim(self):
        result = formatArgs(('msg %d %s: %j', 1, 'anh'))
        assert result.message == 'msg 1 anh: %j'
        assert result.fields is None

    def test_none_arguments(self):
        result = formatArgs(('message %d %s: %j', None, 'anh', None, {'another': 'field'}))
        assert result.message == 'message NaN anh: undefined'
        assert result.fields == {'another': 'field'}

    def test_non_mapping_extras_are_dropped(self):
        result = formatArgs(('%s!', 'debug', 42, 'extra', {'kept': True}))
        assert result.message == 'debug!'
        assert result.fields == {'kept': True}

    def test_later_trailing_mapping_wins(self):
        result = formatArgs(('x', {'a': 1, 'b': 1}, {'b': 2}))
        assert result.fields == {'a': 1, 'b': 2}

    def test_percent_escape_only_with_arguments(self):
        assert formatPrintf('100%%', ()) == ('100%%', ())
        message, leftover = formatPrintf('100%% %s', ('done',))
        assert message == '100% done'
        assert leftover == ()

    def test_leftover_arguments_returned(self):
        message, leftover = formatPrintf('%s', ('a', 'b', {'c': 1}))
        assert message == 'a'
        assert leftover == ('b', {'c': 1})

    def test_other_directives(self):
        assert formatPrintf('%i', ('42.9px',))[0] == '42'
        assert formatPrintf('%f', ('2.50kg',))[0] == '2.5'
        assert formatPrintf('%o', ('x',))[0] == "'x'"
        assert formatPrintf('a%cb', ('color: red',))[0] == 'ab'

    def test_json_directive_circular(self):
        cyclic = {}
        cyclic['self'] = cyclic
        assert formatPrintf('%j', (cyclic,))[0] == '[Circular]'

    def test_json_directive_string(self):
        assert formatPrintf('%j', ('x',))[0] == '"x"'

    def test_json_directive_oversize_integer(self):
        assert formatPrintf('%j', (2 ** 70,))[0] == '"%d"' % 2 ** 70

    def test_json_directive_none(self):
        assert formatPrintf('%j', (None,))[0] == 'undefined'

    def test_string_without_directives_keeps_fields(self):
        result = formatArgs(('plain', {'a': 1}))
        assert result.message == 'plain'
        assert result.fields == {'a': 1}


class TestNumberCoercion:

    @pytest.mark.parametrize("value,expected", [
        (None, 'NaN'),
        (1, '1'),
        (2.0, '2'),
        (1.5, '1.5'),
        (True, '1'),
        (False, '0'),
        ('12', '12'),
        (' 7 ', '7'),
        ('', '0'),
        ('0x10', '16'),
        ('3.25', '3.25'),
        ('abc', 'NaN'),
        ({'a': 1}, 'NaN'),
        (float('inf'), 'Infinity'),
        (float('nan'), 'NaN'),
    ])
    def test_to_number(self, value, expected):
        assert toNumber(value) == expected


# ============================================================================
# Message forms
# ============================================================================

class TestMessageForms:

    def test_no_arguments_has_no_message(self):
        result = formatArgs(())
        assert result == Formatted()
        assert result.hasMessage is False

    def test_explicit_none_is_a_message(self):
        result = formatArgs((None,))
        assert result.hasMessage is True
        assert result.message is None

    def test_zero_is_a_message(self):
        result = formatArgs((0,))
        assert result.hasMessage is True
        assert result.message == 0

    def test_structured_object(self):
        result = formatArgs(({'message': 'some fatal!', 'line': 15},))
        assert result.message == 'some fatal!'
        assert result.fields == {'line': 15}

    def test_structured_object_without_message(self):
        result = formatArgs(({'line': 15},))
        assert result.hasMessage is False
        assert result.fields == {'line': 15}

    def test_structured_object_values_are_not_printf_processed(self):
        result = formatArgs(({'message': '%s stays', 'pct': '%d'}, 'ignored'))
        assert result.message == '%s stays'
        assert result.fields == {'pct': '%d'}


# ============================================================================
# Errors
# ============================================================================

class TestErrors:

    def test_plain_exception(self):
        result = formatArgs((Exception('headshot'),))
        assert result.message == 'headshot'
        assert result.err['message'] == 'headshot'
        assert result.err['name'] == 'Exception'
        assert 'code' not in result.err
        assert 'headshot' in result.err['stack']

    def test_exception_with_code(self):
        err = SyntaxError('oh dear')
        err.code = 'SYNTAX'
        result = formatArgs((err,))
        assert result.message == 'SYNTAX: oh dear'
        assert result.err['message'] == 'oh dear'
        assert result.err['name'] == 'SyntaxError'
        assert result.err['code'] == 'SYNTAX'
        assert 'oh dear' in result.err['stack']

    def test_raised_exception_has_traceback(self):
        try:
            raise RuntimeError('kaput')
        except RuntimeError as exc:
            result = formatArgs((exc,))
        assert result.err['stack'].startswith('Traceback (most recent call last)')
        assert result.err['stack'].endswith('RuntimeError: kaput')

    def test_os_error_uses_symbolic_errno(self):
        err = FileNotFoundError(errno.ENOENT, 'No such file or directory')
        detail = errorDetail(err)
        assert detail['code'] == 'ENOENT'
        assert errorMessage(detail).startswith('ENOENT: ')

    def test_further_arguments_ignored(self):
        result = formatArgs((ValueError('bad'), {'field': 1}, 'more'))
        assert result.message == 'bad'
        assert result.fields is None

    def test_stack_can_be_excluded(self):
        detail = errorDetail(ValueError('bad'), includeStack=False)
        assert detail == {'message': 'bad', 'name': 'ValueError'}

    def test_duck_typed_error(self):
        result = formatArgs((ErrorLike('boom', 'STACK', code='E42'),))
        assert result.message == 'E42: boom'
        assert result.err == {'message': 'boom', 'name': 'ErrorLike', 'code': 'E42', 'stack': 'STACK'}
