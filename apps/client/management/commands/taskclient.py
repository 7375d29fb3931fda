import shlex

from django.core.management.base import BaseCommand

from apps.client.app import build_client_application
from apps.client.routing import nav_links
from apps.client.views import LoginView, RegisterView, TaskManagerView

HELP_TEXT = """Commands:
  go <path>                      navigate (/, /login, /register, /tasks)
  login <email> <password>       sign in with email and password (on /login)
  register <email> <password>    create an account (on /register)
  google <id_token>              sign in with a Google ID token (on /login or /register)
  add <title>                    add a task (on /tasks)
  reload                         reload the current view
  logout                         sign out
  quit                           exit"""


class Command(BaseCommand):
    help = 'Interactive console client for the Task API'

    def add_arguments(self, parser):
        parser.add_argument('--api-key', help='Firebase web API key (default: FIREBASE_WEB_API_KEY)')
        parser.add_argument('--base-url', help='Task API base URL (default: TASK_API_BASE_URL)')
        parser.add_argument('--session-file', help='Where to persist the signed-in session')

    def handle(self, *args, **options):
        app = build_client_application(
            api_key=options.get('api_key'),
            base_url=options.get('base_url'),
            session_file=options.get('session_file'),
        )
        app.start()
        self.render(app)

        try:
            while True:
                try:
                    line = input(f'{app.path}> ')
                except EOFError:
                    break
                if not self.dispatch(app, line):
                    break
                self.render(app)
        finally:
            app.close()

    def render(self, app):
        links = '  '.join(f'{label} ({path})' for label, path in nav_links(app.session))
        if links:
            self.stdout.write(links)
        for line in app.view.render():
            self.stdout.write(line)

    def dispatch(self, app, line: str) -> bool:
        """Run one command line. Returns False to exit."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.stdout.write(self.style.ERROR(str(e)))
            return True
        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]
        view = app.view

        if command in ('quit', 'exit'):
            return False
        if command == 'help':
            self.stdout.write(HELP_TEXT)
        elif command == 'go' and len(args) == 1:
            app.navigate(args[0])
        elif command == 'reload':
            app.navigate(app.path)
        elif command == 'logout':
            app.identity.sign_out()
        elif command == 'login' and len(args) == 2 and isinstance(view, LoginView):
            view.email, view.password = args
            view.login_with_email()
        elif command == 'register' and len(args) == 2 and isinstance(view, RegisterView):
            view.email, view.password = args
            view.register_with_email()
        elif command == 'google' and len(args) == 1 and isinstance(view, LoginView):
            view.login_with_google(args[0])
        elif command == 'google' and len(args) == 1 and isinstance(view, RegisterView):
            view.register_with_google(args[0])
        elif command == 'add' and args and isinstance(view, TaskManagerView):
            view.new_title = ' '.join(args)
            view.add_task()
        else:
            self.stdout.write(self.style.WARNING(f'Unknown command here: {line.strip()} (try "help")'))
        return True
