#!/usr/bin/env python3
"""
Development tasks for CountQL.

Usage: python dev_tasks.py <command>
"""

import os
import shutil
import subprocess
import sys

LAMBDA_BUILD_DIR = os.path.join("build", "lambda")
LAMBDA_ARCHIVE = os.path.join("dist", "countResolver")


def run_command(command, check=True):
    print(f"Running: {command}")
    result = subprocess.run(command, shell=True, check=check)
    return result.returncode == 0


def clean():
    print("Cleaning build artifacts...")
    for path in ["build", "dist", ".pytest_cache", "htmlcov"]:
        shutil.rmtree(path, ignore_errors=True)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _files in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)
    print("Clean completed.")


def format_code():
    print("Formatting code...")
    run_command("black countql tests examples")
    run_command("isort countql tests examples")
    print("Code formatting completed.")


def lint():
    print("Running linting...")
    success = True
    if not run_command("mypy countql", check=False):
        success = False
    if not run_command("flake8 countql tests examples", check=False):
        success = False
    if not success:
        print("Linting failed.")
        sys.exit(1)
    print("Linting passed.")


def test():
    print("Running tests...")
    run_command("pytest tests/ -v --cov=countql --cov-report=html --cov-report=term")
    print("Tests completed.")


def build():
    print("Building package...")
    clean()
    run_command("python -m build")
    print("Build completed.")


def package_executor():
    """Zip the executor function code uploaded under TransformConfig.code_s3_key."""
    print("Packaging count executor...")
    shutil.rmtree(LAMBDA_BUILD_DIR, ignore_errors=True)
    os.makedirs(LAMBDA_BUILD_DIR)
    # boto3 ships with the Lambda runtime
    run_command(f"pip install python-dotenv -t {LAMBDA_BUILD_DIR}")
    shutil.copytree("countql", os.path.join(LAMBDA_BUILD_DIR, "countql"),
                    ignore=shutil.ignore_patterns("__pycache__", "*.pyc"))
    archive = shutil.make_archive(LAMBDA_ARCHIVE, "zip", LAMBDA_BUILD_DIR)
    print(f"Executor package written to {archive}")


def install_dev():
    print("Installing in development mode...")
    run_command("pip install -e .[dev,test]")
    print("Development installation completed.")


def check_package():
    print("Checking package...")
    run_command("python -m twine check dist/*")
    print("Package check completed.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python dev_tasks.py <command>")
        print("Commands: clean, format, lint, test, build, package-executor, install-dev, check, all")
        sys.exit(1)
    command = sys.argv[1]
    commands = {
        "clean": clean,
        "format": format_code,
        "lint": lint,
        "test": test,
        "build": build,
        "package-executor": package_executor,
        "install-dev": install_dev,
        "check": check_package,
        "all": lambda: (format_code(), lint(), test(), build(), check_package()),
    }
    fn = commands.get(command)
    if not fn:
        print(f"Unknown command: {command}")
        sys.exit(1)
    fn()


if __name__ == "__main__":
    main()
