#!/usr/bin/env python
# -*- coding: utf-8 -*-
# mypy: ignore-errors
"""
Development scripts.

You need ``invoke`` installed to run them.
"""
import os
import re

import invoke


ROOT = os.path.dirname(os.path.abspath(__file__))
PACKAGE = "src/py_gql_starlette"
DEFAULT_TARGETS = f"{PACKAGE} tests examples"

VALID_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:\.(dev|a|b|rc)\d+)?$")


def _join(*cmd):
    return " ".join(c for c in cmd if c)


@invoke.task()
def clean(ctx, full=False):
    """
    Remove artifacts and local caches.
    """
    with ctx.cd(ROOT):
        ctx.run('find src tests -type f -name "*.pyc" -delete')
        ctx.run('find src tests -type d -name "__pycache__" -delete')
        ctx.run('find . src tests -type f -path "*.egg-info*" -delete')

        if full:
            # These can be useful to keep across test / lint runs so we keep
            # them by default. Pass --full to get as close to a fresh state as
            # possible.
            ctx.run(
                _join(
                    "rm",
                    "-rf ",
                    ".pytest_cache",
                    ".mypy_cache",
                    "junit*.xml",
                    "htmlcov*",
                    "coverage*.xml",
                    ".coverage*",
                    "flake8.*",
                    "dist",
                    "build",
                ),
            )


@invoke.task(iterable=["files", "ignore"])
def test(
    ctx,
    coverage=False,
    bail=True,
    verbose=False,
    grep=None,
    files=None,
    junit=False,
    ignore=None,
):
    """
    Run test suite (using: py.test).

    You should be able to run pytest directly but this provides some useful
    shortcuts and defaults.
    """
    ignore = ignore or []
    files = f"{PACKAGE} tests" if not files else " ".join(files)

    with ctx.cd(ROOT):
        ctx.run(
            _join(
                "py.test",
                "-c setup.cfg",
                "--exitfirst" if bail else None,
                (
                    f"--cov {PACKAGE} --cov-config setup.cfg --no-cov-on-fail"
                    if coverage
                    else None
                ),
                "--junit-xml junit.xml" if junit else None,
                "-vvl --full-trace" if verbose else "-q",
                "-rf",
                f"-k {grep}" if grep else None,
                " ".join(f"--ignore {i}" for i in ignore) if ignore else None,
                files,
            ),
            echo=True,
            pty=True,
        )


@invoke.task(iterable=["files"])
def flake8(ctx, files=None):
    files = f"{DEFAULT_TARGETS} setup.py" if not files else " ".join(files)
    ctx.run(_join("flake8", files), echo=True)


@invoke.task(aliases=["typecheck"], iterable=["files"])
def mypy(ctx, files=None):
    files = f"{PACKAGE}" if not files else " ".join(files)
    ctx.run(_join("mypy", files), echo=True)


@invoke.task(aliases=["format"], iterable=["files"])
def fmt(ctx, files=None):
    """
    Run formatters.
    """
    targets = (
        f"{DEFAULT_TARGETS} setup.py tasks.py" if not files else " ".join(files)
    )
    with ctx.cd(ROOT):
        ctx.run(_join("isort", targets), echo=True)
        ctx.run(_join("black", targets), echo=True)


@invoke.task(pre=[flake8, mypy, test])
def check(ctx):
    """
    Run all checks (lint, typecheck and tests).
    """
    with ctx.cd(ROOT):
        pass


@invoke.task
def build(ctx):
    """
    Build source distribution and wheel.
    """
    with ctx.cd(ROOT):
        ctx.run("rm -rf dist", echo=True)
        ctx.run("python setup.py sdist bdist_wheel", echo=True)


@invoke.task
def serve(ctx, port=8000, reload=False):
    """
    Run the example application with uvicorn.
    """
    with ctx.cd(os.path.join(ROOT, "examples")):
        ctx.run(
            _join(
                "uvicorn",
                "--reload" if reload else None,
                f"--port {port}",
                "starlette_server:app",
            ),
            echo=True,
            pty=True,
        )


@invoke.task
def update_version(ctx, version, force=False):
    """
    Update version.
    """
    with ctx.cd(ROOT):
        if not VALID_VERSION_RE.match(version):
            raise invoke.exceptions.Exit(
                "Invalid version format, must match "
                f"/{VALID_VERSION_RE.pattern}/.",
            )

        pkg = {}

        with open(os.path.join(PACKAGE, "version.py")) as f:
            exec(f.read(), {}, pkg)

        local_version = pkg["__version__"]

        if (not force) and local_version >= version:
            raise invoke.exceptions.Exit(
                f"Must increment the version (current {local_version}).",
            )

        with open(os.path.join(PACKAGE, "version.py")) as f:
            new_file = f.read().replace(local_version, version)

        with open(os.path.join(PACKAGE, "version.py"), "w") as f:
            f.write(new_file)
