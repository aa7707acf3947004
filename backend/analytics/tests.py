import math

import numpy as np
import pandas as pd
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from .features import PlayerTimes, derive_score_input, players_frame
from .formatting import format_time, parse_time
from .parser import clean_times, normalize_columns, parse_times_file
from .scoring import (
    ScoreContributions,
    ScoreInput,
    average,
    calculate_level_points,
    clamp,
    competitiveness_multiplier,
    length_multiplier,
    popularity_modifier,
    rating_modifier,
    score_level,
)
from .simulator import generate_players, generate_random_times


class ClampTests(SimpleTestCase):
    def test_bounds_and_identity(self):
        self.assertEqual(clamp(-5, 0, 10), 0)
        self.assertEqual(clamp(15, 0, 10), 10)
        self.assertEqual(clamp(3.5, 0, 10), 3.5)

    def test_non_finite_arguments_give_nan(self):
        for args in [(math.nan, 0, 1), (math.inf, 0, 1), (0.5, -math.inf, 1), (0.5, 0, math.nan)]:
            self.assertTrue(math.isnan(clamp(*args)), args)

    def test_average(self):
        self.assertAlmostEqual(average([1, 2, 3, 4]), 2.5)
        self.assertTrue(math.isnan(average([])))


class LengthMultiplierTests(SimpleTestCase):
    def test_floor_and_ceiling(self):
        for wr in [0, 1, 4.99, 5]:
            self.assertEqual(length_multiplier(wr), 0.1)
        for wr in [20, 20.5, 300]:
            self.assertEqual(length_multiplier(wr), 1)

    def test_ease_out_curve(self):
        self.assertAlmostEqual(length_multiplier(10), 0.1 + math.sqrt(5 / 15) * 0.9)
        # sqrt easing: a quarter of the window already gives half the span
        self.assertAlmostEqual(length_multiplier(8.75), 0.1 + 0.5 * 0.9)

    def test_monotonic_on_window(self):
        values = [length_multiplier(t) for t in np.linspace(0, 20, 201)]
        self.assertTrue(all(b >= a for a, b in zip(values, values[1:])))


class CompetitivenessTests(SimpleTestCase):
    def test_too_few_times_short_circuits(self):
        for n in range(0, 6):
            res = competitiveness_multiplier(10, [10.0 + i for i in range(n)], 100, 200)
            self.assertEqual(res.modifier, 0.25)
            self.assertEqual((res.spread_score, res.pb_ratio, res.grindiness_score), (0, 0, 0))

    def test_spread_and_grindiness(self):
        times = [10.0] * 10 + [20.0] * 40
        res = competitiveness_multiplier(times[0], times, 50, 100)

        self.assertAlmostEqual(res.spread_score, (18.0 - 10.0) / 18.0)
        self.assertAlmostEqual(res.pb_ratio, 0.5)
        self.assertAlmostEqual(res.grindiness_score, 1.0)
        self.assertAlmostEqual(res.modifier, 1 + 0.65 * (8.0 / 18.0) + 0.20)

    def test_only_first_50_times_are_used(self):
        times = [10.0] * 50
        longer = times + [1000.0] * 25
        self.assertEqual(
            competitiveness_multiplier(10, times, 50, 100),
            competitiveness_multiplier(10, longer, 50, 100),
        )

    def test_zero_pbs_log_of_zero_becomes_zero_modifier(self):
        res = competitiveness_multiplier(10, [10.0 + i for i in range(10)], 0, 50)
        self.assertEqual(res.pb_ratio, 0)
        self.assertEqual(res.grindiness_score, -math.inf)
        self.assertEqual(res.modifier, 0)

    def test_all_zero_times_division_becomes_zero_modifier(self):
        res = competitiveness_multiplier(0, [0.0] * 8, 8, 8)
        self.assertTrue(math.isnan(res.spread_score))
        self.assertEqual(res.modifier, 0)

    def test_modifier_is_clamped(self):
        # pb/records ratio far above 1 pushes the log term up
        res = competitiveness_multiplier(1, [1.0] * 10 + [100.0] * 40, 10**12, 1)
        self.assertEqual(res.modifier, 3)

    def test_tiny_pb_ratio_drives_modifier_negative(self):
        # 6 PBs out of 10000 records: the log term outweighs the +1 base
        times = [10.0, 11.0, 12.0, 13.0, 14.0, 15.0]
        res = competitiveness_multiplier(times[0], times, 6, 10000)

        self.assertEqual(res.spread_score, 0)
        self.assertAlmostEqual(res.modifier, 1 + 0.2 * (1 + math.log(2 * 6 / 10000)))
        self.assertLess(res.modifier, 0)
        self.assertGreaterEqual(res.modifier, -3)


class RatingAndPopularityTests(SimpleTestCase):
    def test_rating_is_linear_and_clamped(self):
        self.assertAlmostEqual(rating_modifier(0), 0.5)
        self.assertAlmostEqual(rating_modifier(50), 0.9)
        self.assertAlmostEqual(rating_modifier(100), 1.3)
        self.assertAlmostEqual(rating_modifier(-20), 0.5)
        self.assertAlmostEqual(rating_modifier(180), 1.3)

    def test_popularity_plateaus(self):
        for pb in [0, 1, 4]:
            self.assertAlmostEqual(popularity_modifier(pb), 0.8)
        for pb in [250, 251, 10_000]:
            self.assertAlmostEqual(popularity_modifier(pb), 1.3)
        self.assertAlmostEqual(popularity_modifier(125), 0.75 + math.sqrt(124 / 249) * 0.55)

    def test_popularity_monotonic(self):
        values = [popularity_modifier(pb) for pb in range(0, 300)]
        self.assertTrue(all(b >= a for a, b in zip(values, values[1:])))


class CalculateLevelPointsTests(SimpleTestCase):
    def test_no_records_returns_zero(self):
        for top_times in [(), (12.0, 13.0)]:
            res = calculate_level_points(ScoreInput(top_times=top_times, personal_bests=4, total_records=0, level_rating=100))
            self.assertEqual(res.points, 0)
            self.assertEqual(res.contributions, ScoreContributions(0, 0, 0, 0))

    def test_scenario_empty_level(self):
        res = calculate_level_points(ScoreInput(top_times=[], personal_bests=0, total_records=0, level_rating=100))
        self.assertEqual(res.points, 0)

    def test_scenario_single_time(self):
        res = calculate_level_points(ScoreInput(top_times=[10], personal_bests=1, total_records=1, level_rating=100))
        length = 0.1 + math.sqrt(5 / 15) * 0.9

        self.assertAlmostEqual(res.contributions.length, length)
        self.assertEqual(res.contributions.competitiveness, 0.25)
        self.assertAlmostEqual(res.contributions.popularity, 0.8)
        self.assertEqual(res.contributions.rating, 1)
        self.assertEqual(res.points, round(2500 * length * 0.25 * 1 * 0.8))
        self.assertEqual(res.points, 310)

    def test_scenario_identical_times_stays_finite(self):
        res = calculate_level_points(
            ScoreInput(top_times=[5.0] * 50, personal_bests=250, total_records=1000, level_rating=100)
        )
        diag = competitiveness_multiplier(5.0, [5.0] * 50, 250, 1000)

        self.assertEqual(diag.spread_score, 0)
        self.assertAlmostEqual(diag.pb_ratio, 0.25)
        self.assertAlmostEqual(diag.grindiness_score, 1 + math.log(0.5))
        self.assertTrue(math.isfinite(res.contributions.competitiveness))
        self.assertAlmostEqual(res.contributions.competitiveness, 1 + 0.2 * (1 + math.log(0.5)))
        self.assertEqual(res.points, 345)

    def test_empty_times_fall_back_to_zero_world_record(self):
        # records without any ranked time: WR treated as 0 -> length floor
        res = calculate_level_points(ScoreInput(top_times=[], personal_bests=0, total_records=3, level_rating=100))
        self.assertEqual(res.contributions.length, 0.1)
        self.assertEqual(res.contributions.competitiveness, 0.25)
        self.assertEqual(res.points, 50)

    def test_rating_is_reported_but_not_applied(self):
        base = dict(top_times=[30.0], personal_bests=1, total_records=2)
        low = calculate_level_points(ScoreInput(level_rating=0, **base))
        high = calculate_level_points(ScoreInput(level_rating=100, **base))

        self.assertEqual(low.points, high.points)
        self.assertEqual(low.contributions.rating, 1)
        self.assertEqual(high.contributions.rating, 1)

    def test_negative_modifier_gives_negative_points(self):
        score_input = ScoreInput(top_times=[10.0, 11.0, 12.0, 13.0, 14.0, 15.0], personal_bests=6, total_records=10000)
        res = calculate_level_points(score_input)

        self.assertAlmostEqual(res.contributions.competitiveness, -0.1451, places=4)
        self.assertEqual(res.points, -186)

    def test_half_points_round_up(self):
        # 2500 * 1 * 0.25 * 1 * 1.3 lands exactly on 812.5
        res = calculate_level_points(ScoreInput(top_times=[30.0], personal_bests=250, total_records=300))

        self.assertEqual(res.contributions.length, 1)
        self.assertEqual(res.contributions.competitiveness, 0.25)
        self.assertEqual(res.points, 813)
        self.assertEqual(round(812.5), 812)

    def test_score_level_returns_the_diagnostics_used(self):
        times = [10.0] * 10 + [20.0] * 40
        result, diagnostics = score_level(ScoreInput(top_times=times, personal_bests=50, total_records=100))

        self.assertEqual(diagnostics, competitiveness_multiplier(times[0], times, 50, 100))
        self.assertEqual(result.contributions.competitiveness, diagnostics.modifier)

        empty, empty_diag = score_level(ScoreInput())
        self.assertEqual(empty.points, 0)
        self.assertEqual(empty_diag.modifier, 0)

    def test_nan_multiplier_counts_as_zero(self):
        res = calculate_level_points(ScoreInput(top_times=[0.0] * 8, personal_bests=8, total_records=8))
        self.assertEqual(res.contributions.competitiveness, 0)
        self.assertEqual(res.points, 0)

    def test_deterministic(self):
        score_input = ScoreInput(
            top_times=sorted(12.0 + (i * 0.37) % 5 for i in range(40)),
            personal_bests=40,
            total_records=310,
            level_rating=72,
        )
        self.assertEqual(calculate_level_points(score_input).to_dict(), calculate_level_points(score_input).to_dict())

    def test_result_is_json_ready(self):
        payload = calculate_level_points(ScoreInput(top_times=[25.0], personal_bests=1, total_records=1)).to_dict()
        self.assertEqual(set(payload), {"points", "contributions"})
        self.assertEqual(set(payload["contributions"]), {"length", "competitiveness", "rating", "popularity"})


class DeriveScoreInputTests(SimpleTestCase):
    def test_derives_best_times_and_counts(self):
        players = [
            {"name": "ana", "times": [30.0, 25.0]},
            {"name": "bo", "times": [40.0]},
            {"name": "cy", "times": []},
        ]
        score_input = derive_score_input(players)

        self.assertEqual(score_input.top_times, (25.0, 40.0))
        self.assertEqual(score_input.personal_bests, 2)
        self.assertEqual(score_input.total_records, 3)
        self.assertEqual(score_input.level_rating, 100)

    def test_top_times_truncated_to_50(self):
        players = [PlayerTimes(name=f"p{i}", times=(100.0 - i, 200.0)) for i in range(60)]
        score_input = derive_score_input(players, level_rating=80)

        self.assertEqual(len(score_input.top_times), 50)
        self.assertEqual(score_input.top_times[0], 41.0)
        self.assertEqual(list(score_input.top_times), sorted(score_input.top_times))
        self.assertEqual(score_input.personal_bests, 60)
        self.assertEqual(score_input.total_records, 120)
        self.assertEqual(score_input.level_rating, 80)

    def test_accepts_frame(self):
        frame = players_frame([PlayerTimes("a", (12.0,)), PlayerTimes("b", (11.0, 13.0))])
        self.assertEqual(list(frame.columns), ["player_id", "player", "time"])
        self.assertEqual(derive_score_input(frame).top_times, (11.0, 12.0))

    def test_same_name_entries_are_separate_players(self):
        players = [{"name": "Player 1", "times": [30.0]}, {"name": "Player 1", "times": [40.0]}]
        score_input = derive_score_input(players)

        self.assertEqual(score_input.personal_bests, 2)
        self.assertEqual(score_input.top_times, (30.0, 40.0))
        self.assertEqual(score_input.total_records, 2)

    def test_uploaded_frame_groups_by_name(self):
        frame = pd.DataFrame({"player": ["a", "a", "b"], "time": [12.0, 10.0, 11.0]})
        score_input = derive_score_input(frame)

        self.assertEqual(score_input.personal_bests, 2)
        self.assertEqual(score_input.top_times, (10.0, 11.0))

    def test_no_players(self):
        score_input = derive_score_input([])
        self.assertEqual(score_input.top_times, ())
        self.assertEqual(calculate_level_points(score_input).points, 0)


class ParserAndFormattingTests(SimpleTestCase):
    def test_format_time(self):
        self.assertEqual(format_time(0), "00:00:000")
        self.assertEqual(format_time(65.25), "01:05:250")
        self.assertEqual(format_time(600.5), "10:00:500")
        self.assertEqual(format_time(float("nan")), "-")

    def test_parse_time(self):
        self.assertEqual(parse_time(12), 12.0)
        self.assertEqual(parse_time("12.5"), 12.5)
        self.assertEqual(parse_time("01:05:250"), 65.25)
        self.assertEqual(parse_time("1:05.5"), 65.5)
        self.assertEqual(parse_time(0), 0.0)
        with self.assertRaises(ValueError):
            parse_time("fast")

    def test_parse_csv_with_synonyms(self):
        content = b"Name,Seconds\nana,01:05:250\nana,70\nbo,12.5\nbo,oops\ncy,-3\n"
        df = parse_times_file(SimpleUploadedFile("times.csv", content, content_type="text/csv"))

        self.assertEqual(list(df.columns), ["player", "time"])
        self.assertEqual(df["player"].tolist(), ["ana", "ana", "bo"])
        self.assertEqual(df["time"].tolist(), [65.25, 70.0, 12.5])

        score_input = derive_score_input(df)
        self.assertEqual(score_input.top_times, (12.5, 65.25))
        self.assertEqual(score_input.total_records, 3)

    def test_unsupported_file_type(self):
        with self.assertRaises(ValueError):
            parse_times_file(SimpleUploadedFile("times.txt", b"player,time\na,1\n"))

    def test_parse_time_rejects_invalid_values(self):
        for bad in ["inf", "nan", "-3", -1.5, float("inf"), "1:75", "00:60:000"]:
            with self.assertRaises(ValueError, msg=repr(bad)):
                parse_time(bad)

    def test_first_synonym_wins(self):
        df = normalize_columns(pd.DataFrame({"name": ["a"], "runner": ["b"], "time": ["12"]}))
        self.assertEqual(list(df.columns), ["player", "runner", "time"])
        self.assertEqual(clean_times(df)["player"].tolist(), ["a"])

    def test_duplicate_columns_rejected(self):
        df = pd.DataFrame([["a", "b", "12"]], columns=["player", "Player", "time"])
        with self.assertRaises(ValueError):
            clean_times(df)

    def test_missing_columns(self):
        with self.assertRaises(ValueError):
            clean_times(pd.DataFrame({"player": ["a"], "score": [3]}))


class SimulatorTests(SimpleTestCase):
    def test_random_times_in_range(self):
        times = generate_random_times(200, 30, 90, rng=np.random.default_rng(1))
        self.assertEqual(len(times), 200)
        self.assertTrue(all(30 <= t < 90 for t in times))

    def test_invalid_range(self):
        with self.assertRaises(ValueError):
            generate_random_times(5, 90, 30)

    def test_seeded_players_are_reproducible(self):
        a = generate_players(n_players=3, times_per_player=4, seed=7)
        b = generate_players(n_players=3, times_per_player=4, seed=7)

        self.assertEqual(a, b)
        self.assertEqual([p.name for p in a], ["Player 1", "Player 2", "Player 3"])
        self.assertTrue(all(len(p.times) == 4 for p in a))

        score_input = derive_score_input(a)
        self.assertEqual(score_input.personal_bests, 3)
        self.assertEqual(score_input.total_records, 12)
