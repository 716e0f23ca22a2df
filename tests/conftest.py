"""Pytest configuration and fixtures."""

import json

import pytest

OLD_SHA = "abc123" + "0" * 34
NEW_SHA = "def456" + "1" * 34


@pytest.fixture
def sample_composer_show():
    """Captured `composer show -a vendor/a` output."""
    return (
        "name     : vendor/a\n"
        "descrip. : An example library\n"
        "keywords : example\n"
        "versions : dev-main, v2.x-dev, 1.2.0, * 1.0.0, v0.9.1\n"
        "type     : library\n"
        "license  : MIT License (MIT)\n"
        f"source   : [git] https://github.com/vendor/a.git {NEW_SHA}\n"
        f"dist     : [zip] https://api.github.com/repos/vendor/a/zipball/{NEW_SHA} {NEW_SHA}\n"
    )


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document into the temporary project root."""

    def write(filename, data):
        path = tmp_path / filename
        path.write_text(json.dumps(data))
        return path

    return write


@pytest.fixture
def composer_project(tmp_path, write_json):
    """A project requiring vendor/a and the curl extension, with vendor/a 1.0.0 installed."""
    write_json("composer.json", {"require": {"vendor/a": "^1.0", "ext-curl": "*"}})
    write_json("composer.lock", {"packages": [{"name": "vendor/a", "version": "1.0.0"}]})
    return tmp_path


@pytest.fixture
def composer_dev_project(tmp_path, write_json):
    """A project with vendor/a pinned to the main branch."""
    write_json("composer.json", {"require": {"vendor/a": "dev-main"}})
    write_json("composer.lock", {
        "packages": [{
            "name": "vendor/a",
            "version": "dev-main",
            "source": {"type": "git", "url": "https://github.com/vendor/a.git", "reference": OLD_SHA},
        }],
    })
    return tmp_path


@pytest.fixture
def npm_project(tmp_path, write_json):
    """A project with one registry package and one git package installed."""
    write_json("package.json", {
        "name": "test-project",
        "dependencies": {
            "express": "^4.18.0",
            "widget": "github:acme/widget#main",
        },
    })
    write_json("package-lock.json", {
        "name": "test-project",
        "lockfileVersion": 3,
        "packages": {
            "": {
                "name": "test-project",
                "dependencies": {"express": "^4.18.0", "widget": "github:acme/widget#main"},
            },
            "node_modules/express": {"version": "4.18.0"},
            "node_modules/express/node_modules/debug": {"version": "2.6.9"},
            "node_modules/widget": {
                "version": "1.0.0",
                "resolved": f"git+ssh://git@github.com/acme/widget.git#{OLD_SHA}",
            },
        },
    })
    return tmp_path
