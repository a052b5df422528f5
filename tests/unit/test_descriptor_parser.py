"""
Unit tests for the placement descriptor parser
"""

import pytest
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import DescriptorSyntaxError
from descriptor.parser import (
    AbsoluteCommand,
    RelativeCommand,
    RemoveCommand,
    parse_descriptor,
)

class TestParseDescriptor:
    """Test cases for parse_descriptor"""

    def test_absolute_line(self):
        d = parse_descriptor("ABS,Foo,Bar,10.0,20.0,5.0")
        assert d.show_info is False
        assert len(d.commands) == 1
        cmd = d.commands[0]
        assert isinstance(cmd, AbsoluteCommand)
        assert (cmd.tag, cmd.name) == ("Foo", "Bar")
        assert (cmd.lat, cmd.lon, cmd.alt) == (10.0, 20.0, 5.0)
        assert cmd.line == "ABS,Foo,Bar,10.0,20.0,5.0"

    def test_relative_line(self):
        d = parse_descriptor("REL,Foo,Bar,1,2,3")
        cmd = d.commands[0]
        assert isinstance(cmd, RelativeCommand)
        assert (cmd.x, cmd.z, cmd.alt) == (1.0, 2.0, 3.0)

    def test_show_info_and_delete(self):
        d = parse_descriptor("ShowInfo\nDEL,Foo\n")
        assert d.show_info is True
        assert d.commands == [RemoveCommand(tag="Foo", line="DEL,Foo")]

    def test_blank_and_comment_lines_ignored(self):
        text = "\n   \n# comment\n// another\n  REL,Foo,Bar,1,2,3  \r\n"
        d = parse_descriptor(text)
        assert len(d.commands) == 1

    def test_whitespace_around_fields(self):
        d = parse_descriptor("ABS, Foo , Bar , 10.5 , -20.25 , 0")
        cmd = d.commands[0]
        assert (cmd.tag, cmd.name, cmd.lat, cmd.lon) == ("Foo", "Bar", 10.5, -20.25)

    def test_order_preserved(self):
        d = parse_descriptor("REL,A,a,1,1,1\nDEL,B\nABS,C,c,1,2,3")
        assert [type(c) for c in d.commands] == [RelativeCommand, RemoveCommand, AbsoluteCommand]

    def test_bad_latitude(self):
        with pytest.raises(DescriptorSyntaxError) as ei:
            parse_descriptor("ABS,Foo,Bar,x,20.0,5.0")
        assert ei.value.field == "lat"
        assert ei.value.token == "x"
        assert "lat" in str(ei.value) and "x" in str(ei.value)

    @pytest.mark.parametrize("line,field", [
        ("ABS,Foo,Bar,1,y,5", "lon"),
        ("ABS,Foo,Bar,1,2,zz", "alt"),
        ("REL,Foo,Bar,a,2,3", "x"),
        ("REL,Foo,Bar,1,b,3", "z"),
        ("REL,Foo,Bar,1,2,nan", "alt"),
    ])
    def test_bad_numbers_name_field(self, line, field):
        with pytest.raises(DescriptorSyntaxError) as ei:
            parse_descriptor(line)
        assert ei.value.field == field

    @pytest.mark.parametrize("line", [
        "ABS,Foo,Bar,1,2",
        "REL,Foo,Bar,1,2,3,4",
        "DEL",
        "ShowInfo,1",
    ])
    def test_bad_field_count(self, line):
        with pytest.raises(DescriptorSyntaxError) as ei:
            parse_descriptor(line)
        assert ei.value.line == line
        assert ei.value.field is None

    def test_unknown_command(self):
        with pytest.raises(DescriptorSyntaxError) as ei:
            parse_descriptor("MOVE,Foo,Bar,1,2,3")
        assert ei.value.token == "MOVE"

    def test_fail_fast_reports_line_number(self):
        with pytest.raises(DescriptorSyntaxError) as ei:
            parse_descriptor("REL,Foo,Bar,1,2,3\nBOGUS\nABS,Foo,Bar,q,2,3")
        assert ei.value.line_no == 2
        assert ei.value.token == "BOGUS"

    def test_empty_tag(self):
        with pytest.raises(DescriptorSyntaxError) as ei:
            parse_descriptor("ABS,,Bar,1,2,3")
        assert ei.value.field == "tag"
