from hubblecli.version import version_line


def test_branch_and_hash():
    line = version_line("hubble", "1.2", "main", "abc")
    assert line.startswith("hubble v1.2@main-abc compiled with Python ")


def test_hash_only():
    assert version_line("hubble", "1.2", "", "abc").startswith("hubble v1.2@abc compiled")


def test_branch_without_hash_ignored():
    assert version_line("hubble", "1.2", "main", "").startswith("hubble v1.2 compiled")