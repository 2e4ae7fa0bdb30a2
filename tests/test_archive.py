import gzip
import logging
import os

import pytest

from bunz import container
from bunz.archive import (
    Statistics,
    default_archive_path,
    default_output_directory,
    list_archive,
    pack,
    unpack,
)
from bunz.exceptions import (
    DecompressionError,
    EmptyArchiveError,
    EmptyDirectoryError,
    NotADirectoryError,
    NotAFileError,
    TruncatedEntryError,
    UnsafePathError,
)
from bunz.utils import format_size

from .conftest import SAMPLE_FILES, read_tree, write_tree


def test_pack_unpack(sample_tree, tmp_path):
    archive_path = tmp_path / 'sample.bunz'

    packed = pack(str(sample_tree), str(archive_path))

    assert archive_path.is_file()
    assert packed.file_count == 3
    assert packed.compressed_bytes == archive_path.stat().st_size
    assert packed.path == str(archive_path)

    restored = tmp_path / 'restored'
    unpacked = unpack(str(archive_path), str(restored))

    assert unpacked == Statistics(
        file_count=3,
        total_bytes=sum(len(_) for _ in SAMPLE_FILES.values()),
        path=str(restored),
    )
    assert read_tree(restored) == SAMPLE_FILES


def test_pack_statistics(sample_tree, tmp_path):
    archive_path = tmp_path / 'sample.bunz'

    statistics = pack(str(sample_tree), str(archive_path))

    metadata, _ = container.decode(gzip.decompress(archive_path.read_bytes()))
    original = sum(len(_) for _ in SAMPLE_FILES.values()) + len(metadata.to_json())

    assert statistics.total_bytes == original
    assert statistics.ratio == round((1 - statistics.compressed_bytes / original) * 100, 2)


def test_pack_metadata_keeps_walk_order(sample_tree, tmp_path):
    archive_path = tmp_path / 'sample.bunz'
    pack(str(sample_tree), str(archive_path))

    metadata = list_archive(str(archive_path))

    assert metadata.version == '1.0'
    assert metadata.created.endswith('Z')
    assert sorted(_.path for _ in metadata.files) == sorted(SAMPLE_FILES)
    assert {_.path: _.size for _ in metadata.files} == {_k: len(_v) for _k, _v in SAMPLE_FILES.items()}


def test_pack_default_output(sample_tree, workdir):
    statistics = pack(str(sample_tree) + os.sep)

    assert statistics.path == 'sample.bunz'
    assert (workdir / 'sample.bunz').is_file()


def test_pack_overwrites(sample_tree, tmp_path):
    archive_path = tmp_path / 'sample.bunz'
    archive_path.write_bytes(b'old content')

    pack(str(sample_tree), str(archive_path))

    assert archive_path.read_bytes()[:2] == b'\x1f\x8b'


def test_pack_level(sample_tree, tmp_path, caplog):
    fast = pack(str(sample_tree), str(tmp_path / 'fast.bunz'), level=1)

    with caplog.at_level(logging.WARNING):
        fallback = pack(str(sample_tree), str(tmp_path / 'fallback.bunz'), level=99)

    assert fast.file_count == fallback.file_count == 3
    assert 'using 9' in caplog.text


def test_pack_verbose(sample_tree, tmp_path, caplog):
    with caplog.at_level(logging.INFO):
        pack(str(sample_tree), str(tmp_path / 'sample.bunz'), verbose=True)

    assert '- src/main.py' in caplog.text
    assert 'Successfully compressed 3 files' in caplog.text


def test_pack_verbose_container_size(sample_tree, tmp_path, caplog):
    archive_path = tmp_path / 'sample.bunz'

    with caplog.at_level(logging.INFO):
        pack(str(sample_tree), str(archive_path), verbose=True)

    raw = gzip.decompress(archive_path.read_bytes())

    assert f'Container size: {format_size(len(raw))}' in caplog.text


def test_pack_write_failure(sample_tree, tmp_path, caplog):
    with caplog.at_level(logging.INFO):
        with pytest.raises(OSError):
            pack(str(sample_tree), str(tmp_path / 'missing' / 'sample.bunz'))

    assert 'Successfully compressed' not in caplog.text
    assert not (tmp_path / 'missing').exists()


@pytest.mark.skipif(os.sep != '/', reason='backslash is a separator on this system')
def test_pack_unpack_backslash_in_name(tmp_path):
    files = {'a\\b.txt': b'back', 'ok.txt': b'ok'}
    source = write_tree(tmp_path / 'source', files)
    archive_path = tmp_path / 'backslash.bunz'

    assert pack(str(source), str(archive_path)).file_count == 2

    unpack(str(archive_path), str(tmp_path / 'target'))

    assert read_tree(tmp_path / 'target') == files


def test_pack_not_a_directory(tmp_path):
    path = tmp_path / 'file.txt'
    path.write_bytes(b'')

    with pytest.raises(NotADirectoryError):
        pack(str(path))

    with pytest.raises(NotADirectoryError):
        pack(str(tmp_path / 'missing'))


def test_pack_not_a_directory_is_builtin_too(tmp_path):
    with pytest.raises(OSError):
        pack(str(tmp_path / 'missing'))


def test_pack_empty_directory(tmp_path, workdir):
    empty = tmp_path / 'empty'
    (empty / 'sub').mkdir(parents=True)

    with pytest.raises(EmptyDirectoryError):
        pack(str(empty))

    assert list(workdir.iterdir()) == []


def test_unpack_default_output(sample_tree, tmp_path):
    archive_path = tmp_path / 'archives' / 'backup.bunz'
    archive_path.parent.mkdir()
    pack(str(sample_tree), str(archive_path))

    statistics = unpack(str(archive_path))

    assert statistics.path == str(tmp_path / 'archives' / 'backup')
    assert read_tree(tmp_path / 'archives' / 'backup') == SAMPLE_FILES


def test_unpack_default_output_without_extension(sample_tree, tmp_path):
    archive_path = tmp_path / 'backup'
    pack(str(sample_tree), str(archive_path))

    statistics = unpack(str(archive_path))

    assert statistics.path == str(tmp_path / 'backup_extracted')
    assert archive_path.is_file()
    assert read_tree(tmp_path / 'backup_extracted') == SAMPLE_FILES


def test_default_paths():
    assert default_archive_path('some/dir/') == 'dir.bunz'
    assert default_output_directory(os.path.join('x', 'data.bunz')) == os.path.join('x', 'data')
    assert default_output_directory('data.tar') == 'data.tar_extracted'
    assert default_output_directory(os.path.join('x', '.bunz')) == os.path.join('x', '.bunz_extracted')


def test_unpack_overwrites(sample_tree, tmp_path):
    archive_path = tmp_path / 'sample.bunz'
    pack(str(sample_tree), str(archive_path))

    restored = write_tree(tmp_path / 'restored', {'README.md': b'stale', 'other.txt': b'kept'})

    unpack(str(archive_path), str(restored))

    assert read_tree(restored) == dict(SAMPLE_FILES, **{'other.txt': b'kept'})


def test_unpack_not_a_file(tmp_path):
    with pytest.raises(NotAFileError):
        unpack(str(tmp_path))

    with pytest.raises(NotAFileError):
        unpack(str(tmp_path / 'missing.bunz'))


def test_unpack_not_gzip(tmp_path):
    archive_path = tmp_path / 'bogus.bunz'
    archive_path.write_bytes(b'this is not an archive')

    with pytest.raises(DecompressionError):
        unpack(str(archive_path), str(tmp_path / 'out'))

    assert not (tmp_path / 'out').exists()


def test_unpack_empty_archive(tmp_path):
    archive_path = tmp_path / 'empty.bunz'
    archive_path.write_bytes(gzip.compress(b'\x0c\x00\x00\x00{"files":[]}'))

    with pytest.raises(EmptyArchiveError):
        unpack(str(archive_path), str(tmp_path / 'out'))

    assert not (tmp_path / 'out').exists()


def test_unpack_truncated(tmp_path):
    raw = container.encode({'a.txt': b'first', 'b.txt': b'second'})
    archive_path = tmp_path / 'broken.bunz'
    archive_path.write_bytes(gzip.compress(raw[:-1]))

    with pytest.raises(TruncatedEntryError):
        unpack(str(archive_path), str(tmp_path / 'out'))

    assert not (tmp_path / 'out').exists()


def test_unpack_refuses_to_escape(tmp_path):
    out = tmp_path / 'out'
    out.mkdir()
    outside = tmp_path / 'outside'
    outside.mkdir()
    os.symlink(outside, out / 'link')

    archive_path = tmp_path / 'evil.bunz'
    archive_path.write_bytes(gzip.compress(container.encode({'link/file.txt': b'evil'})))

    with pytest.raises(UnsafePathError):
        unpack(str(archive_path), str(out))

    assert list(outside.iterdir()) == []


def test_three_files_round_trip(tmp_path):
    files = {'one.txt': b'1', 'two/two.txt': b'22', 'three/3/three.txt': b'333'}
    source = write_tree(tmp_path / 'source', files)
    archive_path = tmp_path / 'three.bunz'

    assert pack(str(source), str(archive_path)).file_count == 3

    target = tmp_path / 'target'
    target.mkdir()

    assert unpack(str(archive_path), str(target)).file_count == 3
    assert read_tree(target) == files
