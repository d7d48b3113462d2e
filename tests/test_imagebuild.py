import io
import struct
from types import SimpleNamespace
from unittest import mock

import pytest

from kernkit.imagebuild import (
    BOOT_FLAG,
    MINIX_MAGIC,
    SETUP_SECTS,
    SYS_SIZE,
    BuildError,
    MinixHeader,
    build_image,
    main,
    major,
    minor,
    root_device_numbers,
)


def _header(magic=MINIX_MAGIC, hdrlen=32, text=0, data=0, bss=0, entry=0, total=0, syms=0):
    return struct.pack("<8I", magic, hdrlen, text, data, bss, entry, total, syms)


def _boot_body(flag=BOOT_FLAG, size=512):
    body = bytearray(b"\x90" * size)
    if size >= 512:
        body[510:512] = flag.to_bytes(2, "little")
    return bytes(body)


@pytest.fixture
def files(tmp_path):
    boot = tmp_path / "bootsect"
    boot.write_bytes(_header() + _boot_body())
    setup = tmp_path / "setup"
    setup.write_bytes(_header() + b"S" * 700)
    system = tmp_path / "system"
    system.write_bytes(b"K" * 3000)
    return boot, setup, system


def _build(boot, setup, system, rootdev=None):
    out = io.BytesIO()
    log = io.StringIO()
    sizes = build_image(boot, setup, system, rootdev, out=out, log=log)
    return sizes, out.getvalue(), log.getvalue()


def test_major_minor_split_device_number():
    assert major(0x0301) == 3
    assert minor(0x0301) == 1


def test_root_device_defaults_and_floppy():
    assert root_device_numbers(None) == (3, 1)
    assert root_device_numbers("FLOPPY") == (0, 0)


def test_root_device_missing_path_raises(tmp_path):
    with pytest.raises(BuildError, match="Couldn't stat root device."):
        root_device_numbers(str(tmp_path / "absent"))


def test_header_round_trip_fields():
    header = MinixHeader.from_bytes(_header(text=100, total=200))
    assert header.magic == MINIX_MAGIC
    assert header.header_length == 32
    assert header.text == 100
    assert header.total == 200


def test_header_too_short():
    with pytest.raises(ValueError):
        MinixHeader.from_bytes(b"\0" * 10)


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"magic": 1}, "Non-Minix header of 'boot'"),
        ({"hdrlen": 48}, "Non-Minix header of 'boot'"),
        ({"data": 4}, "Illegal data segment in 'boot'"),
        ({"bss": 4}, "Illegal bss in 'boot'"),
        ({"entry": 4}, "Non-Minix header of 'boot'"),
        ({"syms": 4}, "Illegal symbol table in 'boot'"),
    ],
)
def test_header_validation_messages(fields, message):
    header = MinixHeader.from_bytes(_header(**fields))
    with pytest.raises(BuildError) as info:
        header.validate("boot")
    assert str(info.value) == message


def test_image_layout(files):
    boot, setup, system = files
    sizes, image, log = _build(boot, setup, system)
    assert sizes == (512, 700, 3000)
    assert len(image) == 512 + SETUP_SECTS * 512 + 3000
    assert image[508] == 1
    assert image[509] == 3
    assert image[512 : 512 + 700] == b"S" * 700
    assert image[512 + 700 : 512 + SETUP_SECTS * 512] == bytes(SETUP_SECTS * 512 - 700)
    assert image[512 + SETUP_SECTS * 512 :] == b"K" * 3000
    assert "Root device is (3, 1)" in log
    assert "Boot sector 512 bytes." in log
    assert "Setup is 700 bytes." in log
    assert "System is 3000 bytes." in log


def test_floppy_root_device_written(files):
    boot, setup, system = files
    _, image, _ = _build(boot, setup, system, "FLOPPY")
    assert image[508:510] == b"\0\0"
    assert int.from_bytes(image[510:512], "little") == BOOT_FLAG


def test_bad_root_major(files):
    boot, setup, system = files
    with mock.patch("kernkit.imagebuild.os.stat", return_value=SimpleNamespace(st_rdev=0x0401)):
        with pytest.raises(BuildError, match="Bad root device --- major #"):
            _build(boot, setup, system, "/dev/whatever")


def test_boot_wrong_size(tmp_path, files):
    _, setup, system = files
    boot = tmp_path / "short"
    boot.write_bytes(_header() + b"\0" * 300)
    with pytest.raises(BuildError, match="Boot block must be exactly 512 bytes"):
        _build(boot, setup, system)


def test_boot_without_flag(tmp_path, files):
    _, setup, system = files
    boot = tmp_path / "noflag"
    boot.write_bytes(_header() + _boot_body(flag=0))
    with pytest.raises(BuildError, match=r"Boot block hasn't got boot flag \(0xAA55\)"):
        _build(boot, setup, system)


def test_boot_header_unreadable(tmp_path, files):
    _, setup, system = files
    boot = tmp_path / "tiny"
    boot.write_bytes(b"\0" * 8)
    with pytest.raises(BuildError, match="Unable to read header of 'boot'"):
        _build(boot, setup, system)


def test_missing_setup(tmp_path, files):
    boot, _, system = files
    with pytest.raises(BuildError, match="Unable to open 'setup'"):
        _build(boot, tmp_path / "nothing", system)


def test_setup_too_large(tmp_path, files):
    boot, _, system = files
    setup = tmp_path / "big_setup"
    setup.write_bytes(_header() + b"S" * (SETUP_SECTS * 512 + 1))
    with pytest.raises(BuildError, match="Setup exceeds 4 sectors"):
        _build(boot, setup, system)


def test_system_too_big(tmp_path, files):
    boot, setup, _ = files
    system = tmp_path / "big_system"
    system.write_bytes(b"\0" * (SYS_SIZE * 16 + 1))
    with pytest.raises(BuildError, match="System is too big"):
        _build(boot, setup, system)


def test_system_at_limit_is_accepted(tmp_path, files):
    boot, setup, _ = files
    system = tmp_path / "limit_system"
    system.write_bytes(b"\0" * (SYS_SIZE * 16))
    sizes, _, _ = _build(boot, setup, system)
    assert sizes[2] == SYS_SIZE * 16


def test_main_usage(capsys):
    assert main(["only", "two"]) == 1
    assert "Usage: build bootsect setup system" in capsys.readouterr().err


def test_main_writes_image(files, capsysbinary):
    boot, setup, system = files
    assert main([str(boot), str(setup), str(system)]) == 0
    captured = capsysbinary.readouterr()
    assert len(captured.out) == 512 + SETUP_SECTS * 512 + 3000


def test_main_reports_error(tmp_path, capsys):
    assert main([str(tmp_path / "a"), str(tmp_path / "b"), str(tmp_path / "c")]) == 1
    assert "Unable to open 'boot'" in capsys.readouterr().err