#!/usr/bin/env python3
"""
Cross-check file matching against pathspec's GitIgnoreSpec

pathspec has no notion of a candidate being a directory, so only file paths
are compared; directories are exercised through the files beneath them.
"""

import pathspec
import pytest

CASES = [
    (["*.log"], ["debug.log", "logs/debug.log", "debug.txt", "debug.log.txt"]),
    (["/build"], ["build/app.js", "src/build/app.js", "build"]),
    (["build/"], ["build/app.js", "src/build/x.o", "build", "builds/x"]),
    (["*.log", "!keep.log"], ["keep.log", "a.log", "sub/keep.log"]),
    (["**/foo"], ["foo", "a/b/foo", "foo/bar", "afoo"]),
    (["a/**/b"], ["a/b", "a/x/y/b", "a/x/b/c", "x/a/b"]),
    (["abc/**"], ["abc/x", "abc/x/y", "abc"]),
    (["doc/*.txt"], ["doc/notes.txt", "doc/server/arch.txt", "x/doc/notes.txt"]),
    (["[a-c]*.py"], ["b.py", "d.py", "src/app.py"]),
    (["file?.txt"], ["file1.txt", "file10.txt"]),
    (["*.log", "!important/*.log"], ["important/x.log", "other/x.log", "x.log"]),
    (["node_modules/", "!node_modules/keep/"], ["node_modules/a.js", "node_modules/keep/file.js"]),
    (["# comment", "", "*.tmp", "!/root.tmp"], ["root.tmp", "sub/root.tmp", "a.tmp"]),
]


@pytest.mark.parametrize("lines,paths", CASES)
def test_matches_reference_implementation(rule_set_from, lines, paths):
    """Ignored/not-ignored decisions agree with pathspec for file paths"""
    spec = pathspec.GitIgnoreSpec.from_lines(lines)
    rules = rule_set_from(lines)
    for path in paths:
        expected = spec.match_file(path)
        actual = rules.effective_outcome(path, is_directory=False).is_ignored
        assert actual == expected, f"{lines} on {path}: expected ignored={expected}"
