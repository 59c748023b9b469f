"""Configuration for the microproduct submission service."""

from os import environ
import warnings

LOGLEVEL = int(environ.get('LOGLEVEL', '20'))
"""
Logging verbosity.

See `https://docs.python.org/3/library/logging.html#levels`_.
"""

# --- SUBMISSION STORE ---

GITHUB_TOKEN = environ.get('GITHUB_TOKEN')
"""Token with read/write access to the contents of the repository."""

if not GITHUB_TOKEN:
    warnings.warn('GITHUB_TOKEN is not set; submissions cannot be written!')

GITHUB_REPO_OWNER = environ.get('GITHUB_REPO_OWNER', '')
"""User or organization that owns the submissions repository."""

GITHUB_REPO_NAME = environ.get('GITHUB_REPO_NAME', '')
"""Name of the repository that holds the submissions."""

if not GITHUB_REPO_OWNER or not GITHUB_REPO_NAME:
    warnings.warn('GITHUB_REPO_OWNER and GITHUB_REPO_NAME must be set to'
                  ' store submissions.')

GITHUB_BRANCH = environ.get('GITHUB_BRANCH') or None
"""Branch to read and write. If ``None``, the repository default is used."""

GITHUB_ENDPOINT = environ.get('GITHUB_ENDPOINT', 'https://api.github.com')
"""Root of the GitHub REST API; override for GitHub Enterprise."""

GITHUB_VERIFY = bool(int(environ.get('GITHUB_VERIFY', '1')))
"""Enable/disable SSL certificate verification for the GitHub API."""

if not GITHUB_VERIFY:
    warnings.warn('Certificate verification for GitHub is disabled; this'
                  ' should not be disabled in production.')

GITHUB_TIMEOUT = float(environ.get('GITHUB_TIMEOUT', '10'))
"""Seconds to wait for a response to a single request to GitHub."""

GITHUB_READ_TRIES = int(environ.get('GITHUB_READ_TRIES', '3'))
"""Number of attempts for reads from GitHub. Writes are never retried."""

GITHUB_READ_RETRY_DELAY = float(environ.get('GITHUB_READ_RETRY_DELAY', '0.5'))
"""Initial delay between read attempts, in seconds; doubles each time."""

SUBMISSIONS_PATH = environ.get('SUBMISSIONS_PATH', 'submissions')
"""Directory in the repository that holds one file per submission."""

# --- SUBMISSION RULES ---

DURATION_WEEKS_MIN = int(environ.get('DURATION_WEEKS_MIN', '2'))
"""
Shortest allowed duration of a microproduct, in weeks.

Submission guidance asks for at least two weeks, but earlier versions of the
service accepted one-week proposals for small tasks. Set to ``1`` to accept
those again.
"""

DURATION_WEEKS_MAX = int(environ.get('DURATION_WEEKS_MAX', '12'))
"""Longest allowed duration of a microproduct, in weeks."""
