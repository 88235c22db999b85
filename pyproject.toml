[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tsprobe"
version = "1.0.0"
description = "MPEG transport stream inspection tools: PID filtering, pcap extraction, payload detection and NAL analysis"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "mpeg-ts",
    "transport-stream",
    "pcap",
    "rtp",
    "h264",
    "h265",
    "nal",
    "broadcast",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tsprobe-pid-drop = "tsprobe.pid_drop:main"
tsprobe-pcap2ts = "tsprobe.pcap2ts:main"

[tool.hatch.build.targets.wheel]
packages = ["tsprobe"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
