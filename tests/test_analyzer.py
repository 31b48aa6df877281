import copy
from datetime import date

import pytest

from spending_analytics import SpendingAnalyzer, fit_line, month_key

TODAY = date(2025, 10, 15)


def tx(amount, day, category_id="food", type="expense", **extra):
    return {"amount": amount, "date": day, "category_id": category_id, "type": type, **extra}


def monthly_series(amounts, category_id="food", months=None):
    """One expense per month, ending at the month before TODAY unless months are given."""
    months = months or ["2025-06", "2025-07", "2025-08", "2025-09", "2025-10"][-len(amounts) - 1:-1]
    return [tx(amount, f"{month}-05", category_id) for amount, month in zip(amounts, months)]


def test_monthly_totals_group_expenses_by_month():
    analyzer = SpendingAnalyzer()
    transactions = [
        tx(40.0, "2025-09-01"),
        tx(60.0, "2025-09-30"),
        tx(25.5, "2025-10-02"),
        tx(2000.0, "2025-10-01", type="income"),
    ]
    assert analyzer.monthly_totals(transactions) == {"2025-09": 100.0, "2025-10": 25.5}


def test_monthly_totals_empty():
    assert SpendingAnalyzer().monthly_totals([]) == {}


def test_month_key_accepts_dates_and_timestamps():
    assert month_key(date(2024, 2, 29)) == "2024-02"
    assert month_key("2025-11-01T12:00:00Z") == "2025-11"


def test_trend_is_stable_without_previous_month():
    analyzer = SpendingAnalyzer()
    result = analyzer.spending_trend({"2025-10": 500.0}, TODAY)
    assert result.trend == "stable"
    assert result.percentage == 0


def test_trend_up_produces_warning_first():
    analyzer = SpendingAnalyzer()
    insights = analyzer.analyze([tx(100.0, "2025-09-10"), tx(150.0, "2025-10-10")], today=TODAY)
    assert insights[0].type == "warning"
    assert insights[0].trend == "up"
    assert insights[0].value == pytest.approx(50.0)
    assert "increased by 50.0%" in insights[0].message


def test_trend_down_produces_success():
    analyzer = SpendingAnalyzer()
    insights = analyzer.analyze([tx(100.0, "2025-09-10"), tx(80.0, "2025-10-10")], today=TODAY)
    assert [i.type for i in insights] == ["success"]
    assert insights[0].trend == "down"
    assert insights[0].value == pytest.approx(20.0)


def test_small_trend_is_not_reported():
    analyzer = SpendingAnalyzer()
    insights = analyzer.analyze([tx(100.0, "2025-09-10"), tx(105.0, "2025-10-10")], today=TODAY)
    assert insights == []


def test_two_months_of_history_yields_nothing_for_category():
    analyzer = SpendingAnalyzer()
    transactions = [tx(100.0, "2025-08-10"), tx(20.0, "2025-09-10")]
    assert analyzer.detect_anomalies(transactions, today=TODAY) == []
    assert analyzer.find_savings_opportunities(transactions) == []
    assert analyzer.predict(transactions) == []


def test_anomaly_detected_against_flat_history():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series([100.0, 100.0, 100.0]) + [tx(400.0, "2025-10-03")]
    anomalies = analyzer.detect_anomalies(transactions, {"food": "Food"}, today=TODAY)
    assert len(anomalies) == 1
    assert anomalies[0].type == "warning"
    assert anomalies[0].value == pytest.approx(300.0)
    assert anomalies[0].message == "Unusual spending detected in Food: 300.0% higher than average"


def test_anomaly_requires_three_prior_months():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series([100.0, 100.0]) + [tx(400.0, "2025-10-03")]
    assert analyzer.detect_anomalies(transactions, today=TODAY) == []


def test_anomaly_uses_population_standard_deviation():
    analyzer = SpendingAnalyzer()
    # mean 100, population stdev ~16.33 -> threshold ~132.66
    history = monthly_series([80.0, 100.0, 120.0])
    assert analyzer.detect_anomalies(history + [tx(130.0, "2025-10-03")], today=TODAY) == []
    assert len(analyzer.detect_anomalies(history + [tx(135.0, "2025-10-03")], today=TODAY)) == 1


def test_anomaly_falls_back_to_uncategorized():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series([50.0, 50.0, 50.0], category_id=None) + [tx(200.0, "2025-10-03", None)]
    anomalies = analyzer.detect_anomalies(transactions, {"food": "Food"}, today=TODAY)
    assert "Uncategorized" in anomalies[0].message


def test_embedded_category_name_is_used():
    analyzer = SpendingAnalyzer()
    transactions = [
        tx(amount, day, "c1", category={"name": "Books"})
        for amount, day in [(50.0, "2025-07-01"), (50.0, "2025-08-01"), (50.0, "2025-09-01"), (200.0, "2025-10-01")]
    ]
    anomalies = analyzer.detect_anomalies(transactions, today=TODAY)
    assert "Books" in anomalies[0].message


def test_savings_opportunity():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series([100.0, 100.0, 30.0])
    insights = analyzer.find_savings_opportunities(transactions, {"food": {"name": "Food"}})
    assert len(insights) == 1
    assert insights[0].type == "info"
    assert insights[0].value == pytest.approx(46.6667, rel=1e-4)
    assert "£30.00 on Food" in insights[0].message
    assert "save you £46.67 per month" in insights[0].message


def test_no_savings_when_spend_is_steady():
    analyzer = SpendingAnalyzer()
    assert analyzer.find_savings_opportunities(monthly_series([100.0, 90.0, 110.0])) == []


def test_analyze_orders_trend_then_anomalies_then_savings():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series([100.0, 100.0, 100.0]) + [tx(400.0, "2025-10-03")]
    insights = analyzer.analyze(transactions, {"food": "Food"}, today=TODAY)
    assert [i.type for i in insights] == ["warning", "warning", "info"]
    assert "increased by 300.0%" in insights[0].message
    assert insights[1].message.startswith("Unusual spending detected in Food")
    assert insights[2].message.startswith("You've spent as low as £100.00 on Food")


def test_income_is_ignored_by_category_analysis():
    analyzer = SpendingAnalyzer()
    transactions = [tx(1000.0, f"2025-0{m}-01", "salary", type="income") for m in (6, 7, 8, 9)]
    assert analyzer.analyze(transactions, today=TODAY) == []
    assert analyzer.predict(transactions) == []


def test_predict_perfect_linear_fit():
    analyzer = SpendingAnalyzer()
    predictions = analyzer.predict(monthly_series([10.0, 20.0, 30.0]))
    assert len(predictions) == 1
    assert predictions[0].category_id == "food"
    assert predictions[0].predicted_amount == pytest.approx(40.0)
    assert predictions[0].confidence == pytest.approx(1.0)


def test_predict_orders_months_chronologically():
    analyzer = SpendingAnalyzer()
    transactions = list(reversed(monthly_series([10.0, 20.0, 30.0])))
    assert analyzer.predict(transactions)[0].predicted_amount == pytest.approx(40.0)


def test_predict_is_never_negative():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series(
        [300.0, 200.0, 100.0, 10.0], months=["2025-06", "2025-07", "2025-08", "2025-09"]
    )
    prediction = analyzer.predict(transactions)[0]
    assert prediction.predicted_amount == 0.0
    assert 0.0 <= prediction.confidence <= 1.0


def test_predict_flat_series_has_zero_confidence():
    analyzer = SpendingAnalyzer()
    prediction = analyzer.predict(monthly_series([50.0, 50.0, 50.0]))[0]
    assert prediction.predicted_amount == pytest.approx(50.0)
    assert prediction.confidence == 0.0


def test_fit_line():
    slope, intercept, r_squared = fit_line([1.0, 3.0, 5.0, 7.0])
    assert slope == pytest.approx(2.0)
    assert intercept == pytest.approx(1.0)
    assert r_squared == pytest.approx(1.0)


def test_analysis_is_pure():
    analyzer = SpendingAnalyzer()
    transactions = monthly_series([100.0, 100.0, 100.0]) + [tx(400.0, "2025-10-03")]
    snapshot = copy.deepcopy(transactions)

    assert analyzer.analyze(transactions, today=TODAY) == analyzer.analyze(transactions, today=TODAY)
    assert analyzer.predict(transactions) == analyzer.predict(transactions)
    assert transactions == snapshot


def test_insight_to_dict_drops_empty_fields():
    analyzer = SpendingAnalyzer()
    insight = analyzer.find_savings_opportunities(monthly_series([100.0, 100.0, 30.0]))[0]
    assert set(insight.to_dict()) == {"type", "message", "value"}
