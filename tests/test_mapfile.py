import pytest

from dumakit.mapfile import MAX_NAME, MapFile, MapFileEntry, module_map_filename
from dumakit.textfile import ErrorType

SAMPLE_MAP = (
    "quicktest\n"
    "\n"
    " Timestamp is 3f1e2d3c\n"
    "\n"
    " Preferred load address is 00400000\n"
    "\n"
    "  Address         Publics by Value              Rva+Base       Lib:Object\n"
    "\n"
    " 0001:00000000       _main                      00401000 f   main.obj\n"
    " 0001:000001a0       ?stackTrace@@YAXXZ         004011a0 f   main.obj\n"
    " 0002:00000010       ?foo@bar@@QAEXXZ           00402010     lib.obj\n"
    " 0001:00000100       $12helper                  00401100 f   x.obj\n"
    "\n"
    " entry point at        0001:00000000\n"
)


@pytest.fixture
def sample_map(tmp_path):
    path = tmp_path / "quicktest.map"
    path.write_text(SAMPLE_MAP)
    return MapFile(path)


def test_sample_parses_without_error(sample_map):
    assert sample_map.error() == ErrorType.NONE
    assert sample_map.module_name == "quicktest"
    assert len(sample_map) == 4
    assert len(sample_map.entries()) == 4


def test_entries_sorted_by_rvabase(sample_map):
    bases = [entry.rvabase for entry in sample_map]
    assert bases == sorted(bases)
    assert [entry.name for entry in sample_map] == [
        "_main",
        "helper",
        "stackTrace",
        "foo.bar",
    ]


def test_entry_fields(sample_map):
    entry = sample_map[2]
    assert entry.section == 0x0001
    assert entry.offset == 0x000001A0
    assert entry.rvabase == 0x004011A0
    assert entry.length == 0
    assert entry.lib == "main.obj"
    assert sample_map[3].lib == "lib.obj"


def test_load_address_is_not_read(sample_map):
    assert sample_map.load_address() == 0


def test_find_entry(sample_map):
    assert sample_map.find_entry(0x004011A5) == 2
    assert sample_map.find_entry(0x00401000) == 0
    assert sample_map.find_entry(0x00402010 + 10000) == 3


def test_find_entry_rejects_out_of_range(sample_map):
    assert sample_map.find_entry(0) is None
    assert sample_map.find_entry(0x00402010 + 10001) is None
    assert sample_map.find_entry(0x00400FFF) is None


def test_missing_file(tmp_path):
    mf = MapFile(tmp_path / "absent.map")
    assert mf.error() == ErrorType.OPEN
    assert mf.entries() == ()
    assert mf.find_entry(0x1000) is None


def test_bad_header_is_parse_error(tmp_path):
    path = tmp_path / "bad.map"
    path.write_text("mod\nAddress Publics by Wrong\n")
    mf = MapFile(path)
    assert mf.error() == ErrorType.PARSE
    assert mf.line() >= 2


def test_missing_blank_line_after_entries_is_parse_error(tmp_path):
    path = tmp_path / "noblank.map"
    path.write_text(
        "m\nAddress Publics by Value Rva+Base Lib:Object\n"
        " 0001:00000010 _f 00401010 f a.obj\n"
    )
    mf = MapFile(path)
    assert mf.error() == ErrorType.PARSE
    assert mf[0].name == "_f" or mf[-1].name == "_f"


def test_entry_ordering_and_truncation():
    low = MapFileEntry(1, 0, 0, "low", 0x10, "a.obj")
    high = MapFileEntry(1, 0, 0, "high", 0x20, "a.obj")
    assert low < high
    assert not high < low
    long_entry = MapFileEntry(name="n" * (MAX_NAME + 10), lib=None)
    assert len(long_entry.name) == MAX_NAME
    assert long_entry.lib == ""


@pytest.mark.parametrize(
    "module, expected",
    [
        ("C:/app/prog.exe", "C:/app/prog.map"),
        ("lib.DLL", "lib.map"),
        ("tool.Exe", "tool.Exe.map"),
        ("prog", "prog.map"),
        ("", ".map"),
    ],
)
def test_module_map_filename(module, expected):
    assert module_map_filename(module) == expected