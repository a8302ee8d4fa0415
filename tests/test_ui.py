import plotly.graph_objects as go

from car_suite.analytics import (
    get_brand_performance_data,
    get_feature_scores,
    get_market_share_data,
    get_price_distribution_data,
)
from car_suite.ui import (
    brand_performance_figure,
    feature_scores_figure,
    market_share_figure,
    price_distribution_figure,
)


def test_figures_from_aggregates(cars):
    figs = [
        brand_performance_figure(get_brand_performance_data(cars)),
        price_distribution_figure(get_price_distribution_data(cars)),
        market_share_figure(get_market_share_data(cars)),
        feature_scores_figure(get_feature_scores(cars)),
    ]
    for fig in figs:
        assert isinstance(fig, go.Figure)
        assert len(fig.data) >= 1


def test_figures_from_empty_aggregates():
    assert len(brand_performance_figure([]).data) == 0
    assert len(price_distribution_figure([]).data) == 0
    assert len(market_share_figure([]).data) == 0


def test_market_share_folds_small_brands():
    data = get_market_share_data([{"companyName": f"B{i}"} for i in range(12)])
    fig = market_share_figure(data, top_n=10)
    labels = list(fig.data[0].labels)
    assert len(labels) == 11
    assert "Others" in labels
