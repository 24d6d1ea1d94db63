"""Centralized constants for AQUA.

Single source of truth for paths, file names and environment variables.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Working directory for AQUA artifacts (generated runner configs, logs)
AQUA_DIR = Path("./.aqua")

ERROR_LOG_FILE = AQUA_DIR / "error.log"

# Per-invocation scratch space for instrumented sources and raw coverage
WORK_DIR_NAME = "work"

# ============================================================================
# CONFIGURATION
# ============================================================================

# Global configuration file looked up in the project root
DEFAULT_CONFIG_FILE = "aqua.json"

# Timeout for a single external tool invocation (seconds)
DEFAULT_COMMAND_TIMEOUT = 600

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "AQUA_"
ENV_COMMAND_TIMEOUT = "AQUA_COMMAND_TIMEOUT"

# ============================================================================
# COVERAGE
# ============================================================================

# Coverage dimensions understood by the threshold enforcer
COVERAGE_DIMENSIONS = ("statements", "branches", "functions", "lines")

COVERAGE_SUMMARY_FILE = "coverage-summary.json"
COVERAGE_FINAL_FILE = "coverage-final.json"
