"""
CodeFirst CLI.

Usage:
    codefirst generate model <Name> [name[:type][:index] ...]

Examples:
    codefirst generate model User email:string:index age:integer
    codefirst generate model Admin::Post title body:text author:references
    codefirst generate model Tag name:string:uniq --no-timestamps
"""

__version__ = "0.1.0"
__cli_name__ = "codefirst"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
