from datetime import date

import pytest

from alumni_network.services.gamification_service import (
    calculate_level, evaluate_achievements, format_points, login_streak, next_level_points, points_for
)


@pytest.mark.parametrize("points, level", [(0, 1), (99, 1), (100, 2), (499, 3), (1000, 5), (80000, 15)])
def test_calculate_level(points, level):
    assert calculate_level(points) == level


def test_next_level_points():
    assert next_level_points(1) == 100
    assert next_level_points(5) == 2000
    assert next_level_points(15) == 75000


def test_format_points():
    assert format_points(950) == "950"
    assert format_points(1500) == "1.5K"
    assert format_points(2_300_000) == "2.3M"


def test_points_for_counts_first_connection_bonus():
    assert points_for({}) == 0
    assert points_for({"connections": 2}) == 70
    assert points_for({"posts": 1, "likes_received": 4, "profile_complete": True}) == 145


def test_login_streak():
    today = date(2024, 3, 10)
    days = [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3), date(2024, 3, 8), date(2024, 3, 9)]
    assert login_streak(days, today=today) == {"current": 2, "longest": 3, "type": "login"}
    assert login_streak([date(2024, 3, 1)], today=today)["current"] == 0
    assert login_streak([], today=today) == {"current": 0, "longest": 0, "type": "login"}


def test_evaluate_achievements_progress_is_capped():
    achievements = {a["id"]: a for a in evaluate_achievements({"connections": 70, "job_applications": 0}, level=5)}
    assert achievements["connection_master"]["progress"] == 50
    assert achievements["connection_master"]["unlocked"] is True
    assert achievements["job_hunter"]["unlocked"] is False
    assert achievements["level_5"]["unlocked"] is True
    assert achievements["level_10"]["progress"] == 5


def test_stats_and_leaderboard(client, alice, bob):
    post = client.post("/api/posts", json={"content": "Hello alumni"}, headers=alice["headers"]).json()
    client.post(f"/api/posts/{post['id']}/like", headers=bob["headers"])

    stats = client.get("/api/gamification/stats", headers=alice["headers"]).json()
    # one login day (5) + one post (25) + one like received (5)
    assert stats["totalPoints"] == 35
    assert stats["level"] == 1
    assert stats["nextLevelPoints"] == 100
    assert stats["leaderboardRank"] == 1
    assert stats["streak"]["current"] == 1
    assert [b["name"] for b in stats["badges"]] == ["Early Adopter"]

    leaderboard = client.get("/api/gamification/leaderboard").json()
    assert [(e["name"], e["points"], e["rank"]) for e in leaderboard] == [("Alice Rao", 35, 1), ("Bob Iyer", 5, 2)]


def test_achievement_catalogue(client, alice):
    achievements = client.get("/api/gamification/achievements", headers=alice["headers"]).json()
    by_id = {a["id"]: a for a in achievements}
    assert by_id["early_adopter"]["unlocked"] is True
    assert by_id["first_connection"]["unlocked"] is False
    assert by_id["first_connection"]["maxProgress"] == 1
