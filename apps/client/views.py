"""
Client views.

Each view holds its own form state and renders to plain text lines.
Failures from the identity provider or the Task API are logged and
swallowed: the view stays where it is and the user can retry.
"""
import logging
from typing import List

import httpx

from .api_client import TaskApiClient, TaskItem
from .identity import IdentityClient, IdentityProviderError, NoActiveSessionError

logger = logging.getLogger(__name__)

CLIENT_ERRORS = (IdentityProviderError, NoActiveSessionError, httpx.HTTPError)


class View:
    title = ''

    def render(self) -> List[str]:
        return [self.title]


class LoadingView(View):
    title = 'Loading...'


class NotFoundView(View):
    title = '404 - Page Not Found'


class HomeView(View):
    title = 'Welcome to the Task Manager App!'

    def render(self) -> List[str]:
        return [self.title, 'Please log in or register to continue.']


class LoginView(View):
    title = 'Login'

    def __init__(self, identity: IdentityClient):
        self.identity = identity
        self.email = ''
        self.password = ''

    def login_with_email(self) -> bool:
        try:
            self.identity.sign_in_with_email_and_password(self.email, self.password)
        except CLIENT_ERRORS as e:
            logger.error(f"Login Error: {e}")
            return False
        return True

    def login_with_google(self, google_id_token: str) -> bool:
        try:
            self.identity.sign_in_with_idp(google_id_token)
        except CLIENT_ERRORS as e:
            logger.error(f"Google Sign-In Error: {e}")
            return False
        return True


class RegisterView(View):
    title = 'Register'

    def __init__(self, identity: IdentityClient):
        self.identity = identity
        self.email = ''
        self.password = ''

    def register_with_email(self) -> bool:
        try:
            self.identity.create_user_with_email_and_password(self.email, self.password)
        except CLIENT_ERRORS as e:
            logger.error(f"Registration Error: {e}")
            return False
        return True

    def register_with_google(self, google_id_token: str) -> bool:
        try:
            self.identity.sign_in_with_idp(google_id_token)
        except CLIENT_ERRORS as e:
            logger.error(f"Google Sign-In Error: {e}")
            return False
        return True


class TaskManagerView(View):
    """Lists the user's tasks on load and adds new ones. No edit/delete."""
    title = 'My Tasks'

    def __init__(self, api: TaskApiClient):
        self.api = api
        self.tasks: List[TaskItem] = []
        self.new_title = ''

    def load(self) -> None:
        try:
            self.tasks = self.api.list_tasks()
        except CLIENT_ERRORS as e:
            logger.error(f"Failed to load tasks: {e}")

    def add_task(self) -> bool:
        try:
            task = self.api.create_task(self.new_title, completed=False)
        except CLIENT_ERRORS as e:
            logger.error(f"Failed to add task: {e}")
            return False
        self.tasks = [*self.tasks, task]
        self.new_title = ''
        return True

    def render(self) -> List[str]:
        lines = [self.title]
        for task in self.tasks:
            mark = 'x' if task.completed else ' '
            lines.append(f'[{mark}] {task.title}')
        if not self.tasks:
            lines.append('(no tasks yet)')
        return lines
