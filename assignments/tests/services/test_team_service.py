from unittest.mock import patch

from django.db import IntegrityError
from django.test import TestCase

from assignments import errors
from assignments.models import Team, User
from assignments.services import TeamService


class TeamServiceTest(TestCase):
    def setUp(self):
        self.team_name = "backend"
        self.members_data = [
            {"user_id": "u1", "username": "Alice", "is_active": True},
            {"user_id": "u2", "username": "Bob", "is_active": True},
            {"user_id": "u3", "username": "Charlie", "is_active": False},
        ]

    def test_upsert_team_creates_team_with_members(self):
        """Тест успешного создания команды с пользователями"""
        team = TeamService.upsert_team(self.team_name, self.members_data)

        self.assertEqual(team.name, self.team_name)
        self.assertEqual(team.members.count(), 3)

        user1 = User.objects.get(id="u1")
        self.assertEqual(user1.username, "Alice")
        self.assertTrue(user1.is_active)
        self.assertEqual(user1.team, team)

    def test_upsert_team_empty_members(self):
        """Тест создания команды без пользователей"""
        team = TeamService.upsert_team("empty_team", [])

        self.assertEqual(team.name, "empty_team")
        self.assertEqual(team.members.count(), 0)

    def test_upsert_team_replaces_membership(self):
        """Повторный upsert полностью заменяет состав, открепленные пользователи остаются в базе"""
        TeamService.upsert_team(self.team_name, self.members_data)

        team = TeamService.upsert_team(self.team_name, [
            {"user_id": "u1", "username": "Alice Cooper", "is_active": False},
            {"user_id": "u4", "username": "Dave", "is_active": True},
        ])

        self.assertEqual(Team.objects.filter(name=self.team_name).count(), 1)
        self.assertEqual(sorted(m.id for m in team.members.all()), ["u1", "u4"])

        user1 = User.objects.get(id="u1")
        self.assertEqual(user1.username, "Alice Cooper")
        self.assertFalse(user1.is_active)

        detached = User.objects.get(id="u2")
        self.assertIsNone(detached.team)

    def test_upsert_team_member_in_other_team(self):
        """Пользователь из команды backend не может попасть в frontend"""
        TeamService.upsert_team("backend", [{"user_id": "u1", "username": "Alice", "is_active": True}])

        with self.assertRaises(errors.ValidationError) as context:
            TeamService.upsert_team("frontend", [{"user_id": "u1", "username": "Alice", "is_active": True}])

        self.assertIn("u1", str(context.exception))
        self.assertIn("backend", str(context.exception))
        self.assertEqual(context.exception.code, 'VALIDATION_ERROR')
        self.assertFalse(Team.objects.filter(name="frontend").exists())
        self.assertEqual(User.objects.get(id="u1").team.name, "backend")

    def test_upsert_team_same_payload_same_team_succeeds(self):
        """Тот же состав под именем исходной команды проходит"""
        TeamService.upsert_team("backend", [{"user_id": "u1", "username": "Alice", "is_active": True}])

        team = TeamService.upsert_team("backend", [{"user_id": "u1", "username": "Alice", "is_active": True}])

        self.assertEqual([m.id for m in team.members.all()], ["u1"])

    def test_upsert_team_conflict_leaves_no_partial_write(self):
        """При конфликте ни один участник не обновляется"""
        TeamService.upsert_team("backend", [{"user_id": "u1", "username": "Alice", "is_active": True}])

        with self.assertRaises(errors.ValidationError):
            TeamService.upsert_team("frontend", [
                {"user_id": "new", "username": "Newbie", "is_active": True},
                {"user_id": "u1", "username": "Renamed", "is_active": True},
            ])

        self.assertFalse(User.objects.filter(id="new").exists())
        self.assertEqual(User.objects.get(id="u1").username, "Alice")

    def test_lock_members_includes_users_without_team(self):
        """Блокируются все участники из запроса, включая пользователей без команды"""
        TeamService.upsert_team("backend", [{"user_id": "u1", "username": "Alice", "is_active": True}])
        User.objects.create(id="loner", username="Loner")

        locked = TeamService._lock_members(["u1", "loner", "new"])

        self.assertEqual(locked, {"u1": "backend", "loner": None})

    def test_upsert_team_user_without_team_joins(self):
        """Пользователь без команды может войти в любую команду, вторая команда уже конфликтует"""
        User.objects.create(id="loner", username="Loner")

        TeamService.upsert_team("frontend", [{"user_id": "loner", "username": "Loner", "is_active": True}])

        self.assertEqual(User.objects.get(id="loner").team.name, "frontend")
        with self.assertRaises(errors.ValidationError):
            TeamService.upsert_team("backend", [{"user_id": "loner", "username": "Loner", "is_active": True}])

    def test_upsert_team_validation(self):
        """Пустое имя, пустой user_id и дубликаты отклоняются"""
        bad_inputs = [
            ("", []),
            ("backend", [{"user_id": "", "username": "Nobody", "is_active": True}]),
            ("backend", [
                {"user_id": "u1", "username": "Alice", "is_active": True},
                {"user_id": "u1", "username": "Alice again", "is_active": True},
            ]),
        ]
        for team_name, members in bad_inputs:
            with self.subTest(team_name=team_name, members=members):
                with self.assertRaises(errors.ValidationError):
                    TeamService.upsert_team(team_name, members)

        self.assertFalse(Team.objects.exists())

    def test_upsert_team_creation_race(self):
        """Если команду с тем же именем создали параллельно - TEAM_EXISTS"""
        with patch.object(Team.objects, 'create', side_effect=IntegrityError('duplicate key')):
            with self.assertRaises(errors.TeamAlreadyExists) as context:
                TeamService.upsert_team(self.team_name, self.members_data)

        self.assertEqual(context.exception.code, 'TEAM_EXISTS')
        self.assertFalse(User.objects.exists())

    def test_get_team_by_name_success(self):
        """Тест успешного получения команды с пользователями"""
        TeamService.upsert_team(self.team_name, self.members_data)

        team = TeamService.get_team_by_name(self.team_name)

        self.assertEqual(team.name, self.team_name)
        self.assertEqual(team.members.count(), 3)

    def test_get_team_by_name_not_found(self):
        """Тест получения несуществующей команды"""
        with self.assertRaises(errors.NotFound):
            TeamService.get_team_by_name("nonexistent")

    def test_get_team_by_member(self):
        TeamService.upsert_team(self.team_name, self.members_data)

        team = TeamService.get_team_by_member("u2")

        self.assertEqual(team.name, self.team_name)

    def test_get_team_by_member_without_team(self):
        User.objects.create(id="loner", username="Loner")

        with self.assertRaises(errors.NotFound):
            TeamService.get_team_by_member("loner")

    def test_create_or_update_user_existing_user(self):
        """Тест обновления существующего пользователя"""
        team = Team.objects.create(name="test_team")
        User.objects.create(id="existing", username="Old Name", is_active=False)

        member_data = {"user_id": "existing", "username": "New Name", "is_active": True}
        user = TeamService._create_or_update_user(team, member_data)

        self.assertEqual(user.username, "New Name")
        self.assertTrue(user.is_active)
        self.assertEqual(user.team, team)
