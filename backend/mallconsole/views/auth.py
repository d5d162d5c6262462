"""Login and registration screens, shown while nobody is signed in."""

from typing import Optional

from mallconsole.views.common import esc


def _error(message: Optional[str], element_id: str) -> str:
    if not message:
        return ""
    return f'<div class="error-message" id="{element_id}">{esc(message)}</div>'


def render_login(login_error: Optional[str] = None, register_error: Optional[str] = None) -> str:
    return (
        '<div class="auth-container">'
        '<form id="loginForm" data-action="login">'
        "<h2>Sign In</h2>"
        '<input type="email" name="email" placeholder="Email" required>'
        '<input type="password" name="password" placeholder="Password" required>'
        f'{_error(login_error, "loginError")}'
        '<button type="submit" class="btn btn-primary">Sign In</button>'
        "</form>"
        '<form id="registerForm" data-action="register">'
        "<h2>Create Account</h2>"
        '<input type="email" name="email" placeholder="Email" required>'
        '<input type="password" name="password" placeholder="Password" required>'
        '<select name="role"><option value="user">User</option><option value="admin">Admin</option></select>'
        f'{_error(register_error, "registerError")}'
        '<button type="submit" class="btn btn-primary">Register</button>'
        "</form>"
        "</div>"
    )
