import json

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from .schemas import POINTS_RESPONSE_KEYS


class LevelPointsAPITests(SimpleTestCase):
    def _post_json(self, path, payload):
        return self.client.post(path, data=json.dumps(payload), content_type="application/json")

    def test_points_from_stats(self):
        resp = self._post_json(
            "/api/points/",
            {"top_times": [10], "personal_bests": 1, "total_records": 1, "level_rating": 100},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()

        for key in POINTS_RESPONSE_KEYS:
            self.assertIn(key, body)
        self.assertEqual(body["points"], 310)
        self.assertEqual(body["contributions"]["rating"], 1)
        self.assertAlmostEqual(body["rating_modifier"], 1.3)
        self.assertEqual(body["competitiveness"]["modifier"], 0.25)
        self.assertEqual(body["wr_display"], "00:10:000")

    def test_zero_records(self):
        resp = self._post_json("/api/points/", {"top_times": [], "personal_bests": 0, "total_records": 0})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["points"], 0)
        self.assertEqual(resp.json()["wr_display"], "-")

    def test_non_finite_diagnostics_become_null(self):
        resp = self._post_json(
            "/api/points/",
            {"top_times": [10, 11, 12, 13, 14, 15], "personal_bests": 0, "total_records": 6},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["competitiveness"]["grindiness_score"])
        self.assertEqual(resp.json()["competitiveness"]["modifier"], 0)

    def test_invalid_stats_rejected(self):
        resp = self._post_json("/api/points/", {"top_times": [12, 10], "personal_bests": -1})
        self.assertEqual(resp.status_code, 400)
        errors = resp.json()["error"]
        self.assertIn("top_times", errors)
        self.assertIn("personal_bests", errors)
        self.assertIn("total_records", errors)

    def test_points_from_players(self):
        resp = self._post_json(
            "/api/players/points/",
            {
                "players": [
                    {"name": "ana", "times": [30.0, 25.0]},
                    {"name": "bo", "times": [40.0]},
                    {"name": "cy", "times": []},
                ]
            },
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["input"]["top_times"], [25.0, 40.0])
        self.assertEqual(body["input"]["personal_bests"], 2)
        self.assertEqual(body["input"]["total_records"], 3)
        self.assertEqual(body["input"]["level_rating"], 100.0)
        # WR >= 20s, < 6 times, < 5 PBs
        self.assertEqual(body["points"], 500)

    def test_upload_csv(self):
        content = b"player,time\nana,21\nana,22\nbo,00:30:000\n"
        resp = self.client.post(
            "/api/upload/",
            {"file": SimpleUploadedFile("times.csv", content, content_type="text/csv"), "level_rating": "50"},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["rows"], 3)
        self.assertEqual(body["input"]["top_times"], [21.0, 30.0])
        self.assertEqual(body["input"]["level_rating"], 50.0)
        self.assertAlmostEqual(body["rating_modifier"], 0.9)

    def test_upload_rejects_bad_file(self):
        resp = self.client.post(
            "/api/upload/",
            {"file": SimpleUploadedFile("times.txt", b"player,time\nana,21\n", content_type="text/plain")},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Unsupported", resp.json()["error"])

    def test_upload_with_two_player_synonyms(self):
        content = b"name,runner,time\na,b,12\n"
        resp = self.client.post("/api/upload/", {"file": SimpleUploadedFile("times.csv", content, content_type="text/csv")})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["input"]["top_times"], [12.0])
        self.assertEqual(resp.json()["input"]["personal_bests"], 1)

    def test_upload_with_duplicate_columns_is_rejected(self):
        content = b"player,Player,time\na,b,12\n"
        resp = self.client.post("/api/upload/", {"file": SimpleUploadedFile("times.csv", content, content_type="text/csv")})

        self.assertEqual(resp.status_code, 400)
        self.assertIn("Duplicate columns", resp.json()["error"])

    def test_players_with_same_name_count_separately(self):
        resp = self._post_json(
            "/api/players/points/",
            {"players": [{"name": "Player 1", "times": [30.0]}, {"name": "Player 1", "times": [40.0]}]},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["input"]["personal_bests"], 2)
        self.assertEqual(resp.json()["input"]["top_times"], [30.0, 40.0])

    def test_simulate_is_seeded(self):
        first = self.client.get("/api/simulate/", {"players": 3, "times": 2, "seed": 42})
        second = self.client.get("/api/simulate/", {"players": 3, "times": 2, "seed": 42})
        self.assertEqual(first.status_code, 200)

        body = first.json()
        self.assertEqual(body, second.json())
        self.assertEqual(len(body["players"]), 3)
        self.assertEqual(body["input"]["personal_bests"], 3)
        self.assertEqual(body["input"]["total_records"], 6)
        self.assertEqual(body["contributions"]["competitiveness"], 0.25)

    def test_simulate_rejects_bad_range(self):
        resp = self.client.get("/api/simulate/", {"min_time": 90, "max_time": 30})
        self.assertEqual(resp.status_code, 400)
