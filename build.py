"""
Builds a standalone find-heavy-dirs executable with PyInstaller
"""
import os
import shutil
import subprocess
import sys

APP_NAME = 'find-heavy-dirs'


def exe_name():
    return APP_NAME + ('.exe' if sys.platform.startswith('win') else '')


def build():
    print("Cleaning old builds...")
    for folder in ['build', 'dist']:
        if os.path.exists(folder):
            shutil.rmtree(folder)

    print("Building executable...")

    cmd = [
        'pyinstaller',
        '--onefile',
        '--console',
        '--name', APP_NAME,
        '--hidden-import', 'psutil',
        'main.py'
    ]

    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.returncode == 0:
        exe_src = os.path.join('dist', exe_name())
        print("Build finished!")
        print(f"Executable: {exe_src}")

        release_dir = 'release'
        os.makedirs(release_dir, exist_ok=True)
        shutil.copy(exe_src, os.path.join(release_dir, exe_name()))

        if os.path.exists('README.md'):
            shutil.copy('README.md', os.path.join(release_dir, 'README.md'))

        print(f"Release assembled in: {release_dir}/")
    else:
        print("Build failed:")
        print(result.stderr)
        sys.exit(1)

if __name__ == '__main__':
    build()
