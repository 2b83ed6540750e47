"""
utils.py: shell command runner used by the hypervisor backends and colored
terminal output used by the CLI
"""
import subprocess

def run(cmd, check=True, silent=False):
    """
    run: runs shell command
    """
    try:
        result = subprocess.run(
            cmd, capture_output=silent, text=True, check=check
        )
        return result
    except subprocess.CalledProcessError as e:
        if not silent:
            error(f"Command failed: {' '.join(cmd)}")
            if e.stderr:
                print(e.stderr)
        raise

def _color(code):
    """
    _color: returns color code that can be use inside terminal
    """
    return f"\033[{code}m"

RED = _color("31")
GREEN = _color("32")
YELLOW = _color("33")
BLUE = _color("34")
BOLD = _color("1")
RESET = _color("0")

def info(msg):
    """
    info: prints message with formatting for INFO
    """
    print(f"{BLUE}[INFO] {msg}{RESET}")

def success(msg):
    """
    success: prints message with formatting for SUCCEEDED event
    """
    print(f"{GREEN}[OK] {msg}{RESET}")

def warning(msg):
    """
    warning: prints message with formatting for WARNING
    """
    print(f"{YELLOW}[WARNING] {msg}{RESET}")

def error(msg):
    """
    error: prints message with formatting for FAILED/ERROR event
    """
    print(f"{RED}[ERROR] {msg}{RESET}")

def heading(msg):
    """
    heading: prints message with formatting for heading for more results
    """
    print(f"\n{BOLD}{msg}{RESET}")
