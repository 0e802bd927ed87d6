from aaccore.version_tool import clean_string, main, parse_version


def test_clean_string_strips_punctuation():
    assert clean_string("[1.30],") == "1.30"


def test_clean_string_keeps_allowed():
    assert clean_string("a_b-c.9") == "a_b-c.9"


def test_clean_string_empty():
    assert clean_string("[],") == ""


def test_parse_bracketed():
    lines = ["dnl header\n", "AC_INIT([FAAC], [1.30], [faac-devel@example.com])\n"]
    assert parse_version(lines, "[FAAC]") == "1.30"


def test_parse_spaces_and_indent():
    assert parse_version(["   AC_INIT ( faac , 2.0.1 )\n"], "faac") == "2.0.1"


def test_parse_wrong_name():
    assert parse_version(["AC_INIT(other, 1.0)\n"], "faac") is None


def test_parse_skips_empty_version():
    lines = ["AC_INIT(faac, [])\n", "AC_INIT(faac, 3.1)\n"]
    assert parse_version(lines, "faac") == "3.1"


def test_parse_nothing():
    assert parse_version([], "faac") is None


def test_main_prints_define(tmp_path, capsys):
    path = tmp_path / "configure.ac"
    path.write_text("AC_INIT([FAAC], [1.30])\n")
    assert main(["[FAAC]", str(path)]) == 0
    assert capsys.readouterr().out == '#define PACKAGE_VERSION "1.30"\n'


def test_main_usage(capsys):
    assert main(["only-one"]) == 1
    assert "usage" in capsys.readouterr().err


def test_main_empty_argument(capsys):
    assert main(["", "x"]) == 1
    assert capsys.readouterr().out == ""


def test_main_missing_file(tmp_path, capsys):
    assert main(["faac", str(tmp_path / "absent.ac")]) == 1
    assert "Failed to open" in capsys.readouterr().err


def test_main_not_found(tmp_path, capsys):
    path = tmp_path / "configure.ac"
    path.write_text("AC_PREREQ(2.69)\n")
    assert main(["faac", str(path)]) == 1
    assert "could not be found" in capsys.readouterr().err