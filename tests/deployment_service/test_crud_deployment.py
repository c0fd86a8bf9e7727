import unittest

from app.models import App, Deployment, DeploymentStatus
from app.deployment_service import crud_deployment
from tests.helpers import make_session_factory


class TestDeploymentCRUD(unittest.TestCase):

    def setUp(self):
        self.engine, SessionLocal = make_session_factory()
        self.db = SessionLocal()
        self.app = App(name="web", repo_url="octocat/hello-world", user_id="alice")
        self.other_app = App(name="api", repo_url="octocat/api", user_id="alice")
        self.db.add_all([self.app, self.other_app])
        self.db.commit()
        self.app_id = self.app.id
        self.other_app_id = self.other_app.id

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_create_deployment_is_queued(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)

        self.assertEqual(deployment.status, DeploymentStatus.QUEUED.value)
        self.assertIsNone(deployment.url)
        self.assertEqual(deployment.app_id, self.app_id)
        self.assertIsNotNone(deployment.created_at)
        self.assertIsNotNone(deployment.updated_at)

    def test_prune_keeps_newest(self):
        ids = [crud_deployment.create_deployment(self.db, app_id=self.app_id).id for _ in range(7)]
        other_ids = [crud_deployment.create_deployment(self.db, app_id=self.other_app_id).id for _ in range(2)]

        deleted = crud_deployment.prune_deployments(self.db, app_id=self.app_id, keep=5)

        self.assertEqual(deleted, 2)
        remaining = {row.id for row in self.db.query(Deployment.id).filter(Deployment.app_id == self.app_id)}
        self.assertEqual(remaining, set(ids[-5:]))
        other_remaining = {row.id for row in self.db.query(Deployment.id).filter(Deployment.app_id == self.other_app_id)}
        self.assertEqual(other_remaining, set(other_ids))

    def test_prune_below_limit_is_noop(self):
        for _ in range(3):
            crud_deployment.create_deployment(self.db, app_id=self.app_id)
        self.assertEqual(crud_deployment.prune_deployments(self.db, app_id=self.app_id, keep=5), 0)

    def test_get_deployment_for_user(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)

        self.assertIsNotNone(crud_deployment.get_deployment_for_user(self.db, deployment_id=deployment.id, user_id="alice"))
        self.assertIsNone(crud_deployment.get_deployment_for_user(self.db, deployment_id=deployment.id, user_id="bob"))
        self.assertIsNone(crud_deployment.get_deployment_for_user(self.db, deployment_id="missing", user_id="alice"))

    def test_update_status_and_url(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)

        updated = crud_deployment.update_deployment_status(
            self.db, deployment_id=deployment.id, status="SUCCESS", url="https://web.example.com"
        )

        self.assertEqual(updated.status, "SUCCESS")
        self.assertEqual(updated.url, "https://web.example.com")

    def test_update_url_only_keeps_status(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)
        created_updated_at = deployment.updated_at

        updated = crud_deployment.update_deployment_status(self.db, deployment_id=deployment.id, url="https://x.example.com")

        self.assertEqual(updated.status, DeploymentStatus.QUEUED.value)
        self.assertEqual(updated.url, "https://x.example.com")
        self.assertGreater(updated.updated_at, created_updated_at)

    def test_update_empty_only_touches_timestamp(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)
        crud_deployment.update_deployment_status(self.db, deployment_id=deployment.id, status="FAILED", url="u")

        updated = crud_deployment.update_deployment_status(self.db, deployment_id=deployment.id)

        self.assertEqual(updated.status, "FAILED")
        self.assertEqual(updated.url, "u")

    def test_update_is_last_write_wins(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)
        crud_deployment.update_deployment_status(self.db, deployment_id=deployment.id, status="SUCCESS")

        updated = crud_deployment.update_deployment_status(self.db, deployment_id=deployment.id, status="QUEUED")

        self.assertEqual(updated.status, "QUEUED")

    def test_update_missing_deployment(self):
        self.assertIsNone(crud_deployment.update_deployment_status(self.db, deployment_id="missing", status="SUCCESS"))

    def test_has_successful_deployment(self):
        deployment = crud_deployment.create_deployment(self.db, app_id=self.app_id)
        self.assertFalse(crud_deployment.has_successful_deployment(self.db, self.app_id))

        crud_deployment.update_deployment_status(self.db, deployment_id=deployment.id, status="SUCCESS")

        self.assertTrue(crud_deployment.has_successful_deployment(self.db, self.app_id))
        self.assertFalse(crud_deployment.has_successful_deployment(self.db, self.other_app_id))


if __name__ == '__main__':
    unittest.main()
