"""
Unit tests for task services.
"""
from uuid import uuid4

from django.test import TestCase

from apps.tasks.models import Task
from apps.tasks import services


class ListAndCreateTest(TestCase):

    def test_create_defaults(self):
        task = services.create_task('alice')
        self.assertEqual(task.owner, 'alice')
        self.assertEqual(task.title, '')
        self.assertFalse(task.completed)
        self.assertIsNotNone(task.id)

    def test_list_is_scoped_to_owner(self):
        mine = services.create_task('alice', title='Buy milk')
        services.create_task('bob', title='Walk dog')

        tasks = services.list_tasks_for_owner('alice')

        self.assertEqual(tasks, [mine])

    def test_list_empty(self):
        self.assertEqual(services.list_tasks_for_owner('nobody'), [])

    def test_list_in_creation_order(self):
        first = services.create_task('alice', title='first')
        second = services.create_task('alice', title='second')
        self.assertEqual(services.list_tasks_for_owner('alice'), [first, second])


class UpdateTaskTest(TestCase):

    def setUp(self):
        self.task = services.create_task('alice', title='Buy milk')

    def test_partial_update_keeps_other_fields(self):
        updated = services.update_task(self.task.id, {'completed': True})
        self.assertTrue(updated.completed)
        self.assertEqual(updated.title, 'Buy milk')

        self.task.refresh_from_db()
        self.assertTrue(self.task.completed)
        self.assertEqual(self.task.title, 'Buy milk')

    def test_update_accepts_string_id(self):
        updated = services.update_task(str(self.task.id), {'title': 'Buy oat milk'})
        self.assertEqual(updated.title, 'Buy oat milk')

    def test_update_ignores_other_keys(self):
        services.update_task(self.task.id, {'owner': 'mallory', 'id': str(uuid4()), 'title': 'x'})
        self.task.refresh_from_db()
        self.assertEqual(self.task.owner, 'alice')
        self.assertEqual(self.task.title, 'x')

    def test_update_missing_returns_none(self):
        self.assertIsNone(services.update_task(uuid4(), {'completed': True}))

    def test_update_malformed_id_returns_none(self):
        self.assertIsNone(services.update_task('not-an-id', {'completed': True}))

    def test_update_with_owner_scope(self):
        self.assertIsNone(services.update_task(self.task.id, {'completed': True}, owner='bob'))
        self.task.refresh_from_db()
        self.assertFalse(self.task.completed)

        updated = services.update_task(self.task.id, {'completed': True}, owner='alice')
        self.assertTrue(updated.completed)


class DeleteTaskTest(TestCase):

    def setUp(self):
        self.task = services.create_task('alice', title='Buy milk')

    def test_delete(self):
        self.assertTrue(services.delete_task(self.task.id))
        self.assertFalse(Task.objects.filter(id=self.task.id).exists())

    def test_delete_missing_is_noop(self):
        self.assertFalse(services.delete_task(uuid4()))
        self.assertFalse(services.delete_task('garbage'))
        self.assertEqual(Task.objects.count(), 1)

    def test_delete_with_owner_scope(self):
        self.assertFalse(services.delete_task(self.task.id, owner='bob'))
        self.assertTrue(Task.objects.filter(id=self.task.id).exists())
