import pytest


SAMPLE_FILES = {
    'README.md': b'# sample\n',
    'src/main.py': b'print("hello")\n' * 50,
    'src/data/empty.bin': b'',
}


def write_tree(root, files):
    for path, content in files.items():
        target = root.joinpath(*path.split('/'))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    return root


def read_tree(root):
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in root.rglob('*') if path.is_file()
    }


@pytest.fixture
def sample_tree(tmp_path):
    """A directory with three files, one of them empty and nested two levels down."""
    return write_tree(tmp_path / 'sample', SAMPLE_FILES)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test from an empty directory, where default outputs land."""
    path = tmp_path / 'work'
    path.mkdir()
    monkeypatch.chdir(path)

    return path
