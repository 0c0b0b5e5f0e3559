"""
Test suite for the instruction parser.

Tests cover:
- Marker dispatch (comment, delete, execute)
- Quote-aware operator scanning
- Overwrite vs merge disambiguation
- Rejection of ambiguous lines
"""

import pytest

from core.instructions import (Comment, Delete, Execute, InstructionParseError, Move,
                               OperatorScan, OverwritePolicy, parse, scan_operators)


class TestMarkers:
    """Lines dispatched by their first character."""

    def test_comment_keeps_text_verbatim(self):
        instruction = parse('# replace binaries > later', 3)
        assert instruction == Comment('# replace binaries > later', 3)

    def test_delete_normalizes_target(self):
        instruction = parse('<  "tmp\\old file.txt"  ', 2)
        assert isinstance(instruction, Delete)
        assert instruction.target == 'tmp\\old file.txt'
        assert instruction.line_number == 2

    def test_delete_expands_environment(self):
        instruction = parse('<%TMPDIR%\\x.log', environ={'TMPDIR': 'C:\\Temp'})
        assert instruction.target == 'C:\\Temp\\x.log'

    def test_execute_keeps_command_line(self):
        instruction = parse('@installer.exe /quiet > out.txt')
        assert instruction == Execute('installer.exe /quiet > out.txt')

    def test_leading_whitespace_is_ignored(self):
        assert isinstance(parse('   <tmp\\a.txt'), Delete)

    def test_empty_delete_target_is_rejected(self):
        with pytest.raises(InstructionParseError):
            parse('<   ')


class TestOperatorScan:
    """Quote-aware counting of '>' and ')'."""

    def test_counts_unquoted_operators(self):
        scan = scan_operators('a > b ) c > d')
        assert scan.gt_count == 2
        assert scan.gt_pos == 10
        assert scan.paren_count == 1
        assert scan.paren_pos == 6

    def test_ignores_operators_inside_quotes(self):
        scan = scan_operators('"a > (b)" > c')
        assert scan == OperatorScan(gt_count=1, gt_pos=10, paren_count=0, paren_pos=-1)

    def test_no_operators(self):
        assert scan_operators('plain text') == OperatorScan()


class TestMoveParsing:
    """Move operations and their overwrite policy."""

    def test_single_gt_is_overwrite(self):
        instruction = parse('tmp\\new.dll > bin\\app.dll', 5)
        assert instruction == Move('tmp\\new.dll', 'bin\\app.dll', OverwritePolicy.OVERWRITE, 5)
        assert instruction.overwrite is True

    def test_single_paren_is_no_overwrite_merge(self):
        instruction = parse('tmp\\plugins ) bin\\plugins')
        assert instruction.policy is OverwritePolicy.NO_OVERWRITE_MERGE
        assert instruction.source == 'tmp\\plugins'
        assert instruction.destination == 'bin\\plugins'
        assert instruction.overwrite is False

    def test_whitespace_around_operator_is_optional(self):
        instruction = parse('a.txt>b.txt')
        assert (instruction.source, instruction.destination) == ('a.txt', 'b.txt')

    def test_operand_split_keeps_character_before_operator(self):
        assert parse('a>b') == Move('a', 'b', OverwritePolicy.OVERWRITE)
        assert parse('a)b') == Move('a', 'b', OverwritePolicy.NO_OVERWRITE_MERGE)
        assert parse('"x y">z').source == 'x y'

    def test_quoted_operators_are_literal(self):
        instruction = parse('"tmp\\a > b.txt" > "out\\(x).txt"')
        assert instruction.policy is OverwritePolicy.OVERWRITE
        assert instruction.source == 'tmp\\a > b.txt'
        assert instruction.destination == 'out\\(x).txt'

    def test_quoted_gt_with_unquoted_paren_is_merge(self):
        instruction = parse('"x>y" ) dest')
        assert instruction.policy is OverwritePolicy.NO_OVERWRITE_MERGE
        assert instruction.source == 'x>y'

    def test_gt_wins_over_single_paren(self):
        instruction = parse('lib(1) > dest')
        assert instruction.policy is OverwritePolicy.OVERWRITE
        assert instruction.source == 'lib(1)'

    def test_operands_expand_environment(self):
        env = {'SRC': 'C:\\stage', 'DST': 'C:\\svc'}
        instruction = parse('%SRC%\\app.exe > "%DST%\\bin"', environ=env)
        assert instruction.source == 'C:\\stage\\app.exe'
        assert instruction.destination == 'C:\\svc\\bin'


class TestUnrecognized:
    """Lines that cannot be turned into an instruction."""

    @pytest.mark.parametrize('line', [
        'bogus line no operator',
        'a > b > c',
        'a ) b ) c',
        'a > b > c ) d ) e',
        '> only-destination',
        'only-source >',
    ])
    def test_rejected(self, line):
        with pytest.raises(InstructionParseError) as excinfo:
            parse(line, 7)
        assert excinfo.value.line_number == 7
        assert 'Unknown file handling instruction' in str(excinfo.value)

    def test_two_gt_falls_back_to_single_paren(self):
        instruction = parse('a>b ) c>d')
        assert instruction.policy is OverwritePolicy.NO_OVERWRITE_MERGE
        assert instruction.source == 'a>b'
        assert instruction.destination == 'c>d'
