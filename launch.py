#!/usr/bin/env python3
"""
Launcher for Print Decision Buddy.
Creates a private virtual env, installs the project into it and starts the
desktop app (or the terminal front end with --cli).
Works on Windows, macOS, and Linux.
"""
import sys
import os
import subprocess
import platform

# Minimum Python version required
MIN_PYTHON = (3, 10)


def check_python_version():
    if sys.version_info < MIN_PYTHON:
        print(f"Error: Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+ is required.")
        print(f"Current version: {sys.version}")
        sys.exit(1)


def get_env_paths():
    """Returns dict with paths for venv and its python based on OS."""
    root_dir = os.path.dirname(os.path.abspath(__file__))
    venv_dir = os.path.join(root_dir, ".buddy_env", "venv")

    if platform.system() == "Windows":
        python_bin = os.path.join(venv_dir, "Scripts", "python.exe")
    else:
        python_bin = os.path.join(venv_dir, "bin", "python3")

    return {"root": root_dir, "venv": venv_dir, "python": python_bin}


def setup_venv(paths):
    """Creates venv if missing and returns its interpreter."""
    if not os.path.exists(paths["venv"]):
        print(f"[INIT] Creating virtual environment in {paths['venv']}...")
        try:
            subprocess.check_call([sys.executable, "-m", "venv", paths["venv"]])
        except subprocess.CalledProcessError:
            print("Error: Failed to create virtual environment.")
            sys.exit(1)

    if not os.path.exists(paths["python"]):
        # Some unix venvs only ship "python"
        alt_path = paths["python"][:-1] if paths["python"].endswith("python3") else None
        if alt_path and os.path.exists(alt_path):
            return alt_path
        print(f"Error: Virtual environment python not found at {paths['python']}")
        sys.exit(1)

    return paths["python"]


def install_project(python_path, root_dir):
    """Installs this project (and its dependencies) in editable mode."""
    print("[INIT] Checking dependencies...")
    cmd = [python_path, "-m", "pip", "install", "-e", root_dir]
    try:
        subprocess.check_call(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except subprocess.CalledProcessError:
        print("Warning: Failed to install some dependencies. App may crash.")


def launch_app(python_path, root_dir, use_cli=False):
    module = "printer_buddy.cli" if use_cli else "printer_buddy.main"
    print("[INFO] Launching Print Decision Buddy...")
    sys.stdout.flush()

    env = os.environ.copy()
    env["PYTHONPATH"] = root_dir

    try:
        subprocess.call([python_path, "-m", module], env=env, cwd=root_dir)
    except KeyboardInterrupt:
        print("\nExiting...")


def main():
    check_python_version()
    paths = get_env_paths()
    venv_python = setup_venv(paths)
    install_project(venv_python, paths["root"])
    launch_app(venv_python, paths["root"], use_cli="--cli" in sys.argv[1:])


if __name__ == "__main__":
    main()
