from pathlib import Path

from setuptools import find_namespace_packages, setup

# Load packages from requirements.txt
BASE_DIR = Path(__file__).parent
with open(Path(BASE_DIR, "requirements.txt")) as file:
    required_packages = [ln.strip() for ln in file.readlines() if ln.strip()]

# Define our package
setup(
    name="learnnova-quiz",
    version="0.1.0",
    description="Quiz session engine for LearnNova: timed exams, integrity monitoring and scoring",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["learnnova", "learnnova.*"]),
    package_data={"learnnova": ["schemas/*.json"]},
    install_requires=required_packages,
    extras_require={
        "dev": ["pytest>=7.0", "pre-commit==2.19.0"],
    },
)
