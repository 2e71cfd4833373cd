"""Unit tests for the record pipeline."""

from dataclasses import replace

import numpy as np
import pytest

from listing_classifier.data import (
    MissingFieldError,
    PipelineConfig,
    PreprocessingError,
    Record,
    RecordPipeline,
    State,
    assign_price_classes,
)


def _uniform_records(n: int = 20) -> list[Record]:
    """Listings whose every numeric field is i, price i * 1000."""
    return [
        Record(
            price=i * 1000.0,
            bed=float(i),
            bath=float(i),
            acre_lot=float(i),
            zip_code=float(i),
            house_size=float(i),
            state=State.VERMONT,
        )
        for i in range(1, n + 1)
    ]


@pytest.fixture
def pipeline() -> RecordPipeline:
    return RecordPipeline()


class TestAssignPriceClasses:
    """Tests for assign_price_classes function."""

    def test_five_classes_over_ten_prices(self) -> None:
        """Bands are 1 <= 280, 2 <= 460, 3 <= 640, 4 < 820, 5 >= 820."""
        prices = np.arange(100.0, 1001.0, 100.0)

        labels = assign_price_classes(prices, 5)

        np.testing.assert_array_equal(labels, [1, 1, 2, 2, 3, 3, 4, 4, 5, 5])

    def test_band_edge_belongs_to_lower_band(self) -> None:
        """A price exactly on an interior edge takes the lower class."""
        # lo=280, hi=820, width=180 -> first interior edge at 460
        prices = np.array([100, 200, 300, 400, 460, 600, 700, 800, 900, 1000.0])

        labels = assign_price_classes(prices, 5)

        assert labels[4] == 2

    def test_labels_are_monotonic_in_price(self, rng) -> None:
        """Higher price never gets a lower class."""
        prices = rng.uniform(1_000, 2_000_000, size=500)

        labels = assign_price_classes(prices, 7)
        order = np.argsort(prices)

        assert np.all(np.diff(labels[order]) >= 0)
        assert labels.min() == 1
        assert labels.max() == 7

    def test_three_classes_has_single_interior_band(self) -> None:
        """With K=3 every price between the percentiles is class 2."""
        prices = np.arange(100.0, 1001.0, 100.0)

        labels = assign_price_classes(prices, 3)

        np.testing.assert_array_equal(labels, [1, 1, 2, 2, 2, 2, 2, 2, 3, 3])

    def test_fewer_than_three_classes_raises(self) -> None:
        """K < 3 leaves no room for interior bands."""
        with pytest.raises(PreprocessingError, match="At least 3"):
            assign_price_classes(np.array([1.0, 2.0, 3.0]), 2)


class TestPipelineInit:
    """Tests for RecordPipeline construction."""

    def test_defaults(self, pipeline) -> None:
        """Defaults match the documented constants."""
        assert pipeline.config.filter_percentile == 0.95
        assert pipeline.config.num_classes == 5
        assert pipeline.config.train_ratio == 0.9
        assert pipeline.feature_count == 23

    def test_rejects_too_few_classes(self) -> None:
        """num_classes below 3 is rejected up front."""
        with pytest.raises(PreprocessingError, match="num_classes"):
            RecordPipeline(PipelineConfig(num_classes=2))

    @pytest.mark.parametrize("ratio", [0.0, 1.0, 1.5])
    def test_rejects_train_ratio_outside_unit_interval(self, ratio: float) -> None:
        """Train ratio must leave both partitions possible."""
        with pytest.raises(PreprocessingError, match="train_ratio"):
            RecordPipeline(PipelineConfig(train_ratio=ratio))


class TestFilterRecords:
    """Tests for the filter stage."""

    def test_drops_values_above_95th_percentile(self, pipeline) -> None:
        """The largest listing exceeds every threshold and is dropped."""
        records = _uniform_records(20)

        kept = pipeline.filter_records(records)

        assert len(kept) == 19
        assert all(r.price <= 19_050.0 for r in kept)

    def test_drops_records_missing_a_filter_field(self, pipeline) -> None:
        """A record without bed is dropped regardless of its other values."""
        records = _uniform_records(20)
        records[4] = replace(records[4], bed=None)

        kept = pipeline.filter_records(records)

        assert all(r.bed is not None for r in kept)
        assert records[4] not in kept

    def test_keeps_records_missing_zip_code(self, pipeline) -> None:
        """Zip code is imputed later, not filtered."""
        records = _uniform_records(20)
        records[2] = replace(records[2], zip_code=None)

        kept = pipeline.filter_records(records)

        assert any(r.zip_code is None for r in kept)

    def test_drops_price_at_or_below_floor(self, pipeline) -> None:
        """Price must be strictly greater than 1.0."""
        records = _uniform_records(20)
        records[0] = replace(records[0], price=1.0)

        kept = pipeline.filter_records(records)

        assert all(r.price > 1.0 for r in kept)

    def test_field_missing_everywhere_drops_everything(self, pipeline) -> None:
        """No threshold can be computed, so nothing survives."""
        records = [replace(r, house_size=None) for r in _uniform_records(10)]

        assert pipeline.filter_records(records) == []

    def test_empty_input(self, pipeline) -> None:
        assert pipeline.filter_records([]) == []


class TestImputeMissing:
    """Tests for the impute stage."""

    def test_fills_missing_zip_with_mean(self, pipeline) -> None:
        """Missing zip codes take the mean of the present ones."""
        records = [
            Record(price=10.0, zip_code=1000.0),
            Record(price=20.0, zip_code=3000.0),
            Record(price=30.0, zip_code=None),
        ]

        filled, zip_mean = pipeline.impute_missing(records)

        assert zip_mean == pytest.approx(2000.0)
        assert filled[2].zip_code == pytest.approx(2000.0)
        assert filled[0].zip_code == 1000.0
        assert filled[2].price == 30.0

    def test_no_zip_codes_raises(self, pipeline) -> None:
        """The mean is undefined when no record has a zip code."""
        with pytest.raises(PreprocessingError, match="no record has one"):
            pipeline.impute_missing([Record(price=10.0), Record(price=20.0)])


class TestAssignClasses:
    """Tests for the classify stage."""

    def test_attaches_labels(self, pipeline) -> None:
        """Every record gets a class consistent with assign_price_classes."""
        records = [Record(price=p) for p in np.arange(100.0, 1001.0, 100.0)]

        labelled = pipeline.assign_classes(records)

        assert [r.price_class for r in labelled] == [1, 1, 2, 2, 3, 3, 4, 4, 5, 5]

    def test_missing_price_raises(self, pipeline) -> None:
        with pytest.raises(MissingFieldError):
            pipeline.assign_classes([Record(price=10.0), Record(price=None)])


class TestStandardize:
    """Tests for the standardize stage."""

    def test_standardized_columns_have_zero_mean_unit_std(
        self, pipeline, sample_records
    ) -> None:
        """Every non-constant continuous feature ends up with mean 0 and std 1."""
        params = pipeline.fit_standardization(sample_records)
        standardized = pipeline.standardize(sample_records, params)

        for name in pipeline.encoder.continuous_fields:
            column = np.array([getattr(r, name) for r in standardized])
            assert abs(column.mean()) < 1e-9
            assert abs(column.std() - 1.0) < 1e-9

    def test_constant_feature_becomes_zero(self, pipeline, sample_records) -> None:
        """A feature with zero std is replaced by 0.0 everywhere."""
        records = [replace(r, bath=2.0) for r in sample_records]

        params = pipeline.fit_standardization(records)
        standardized = pipeline.standardize(records, params)

        assert params.stds["bath"] == 0.0
        assert all(r.bath == 0.0 for r in standardized)

    def test_price_and_state_untouched(self, pipeline, sample_records) -> None:
        """Only the continuous feature fields are rescaled."""
        params = pipeline.fit_standardization(sample_records)
        standardized = pipeline.standardize(sample_records, params)

        assert standardized[3].price == sample_records[3].price
        assert standardized[3].state is sample_records[3].state

    def test_missing_value_raises(self, pipeline, sample_records) -> None:
        """Standardization needs complete columns."""
        records = list(sample_records)
        records[0] = replace(records[0], zip_code=None)

        with pytest.raises(MissingFieldError, match="zip_code"):
            pipeline.fit_standardization(records)


class TestVectorizeAndSplit:
    """Tests for the vectorize and split stages."""

    def test_vectorize_shapes(self, pipeline, sample_records) -> None:
        labelled = pipeline.assign_classes(sample_records)

        features, labels = pipeline.vectorize(labelled)

        assert features.shape == (60, 23)
        assert labels.shape == (60,)
        assert labels.dtype == np.int64

    def test_split_sizes(self, pipeline, rng) -> None:
        """Train partition holds int(N * 0.9) rows."""
        features = np.arange(50.0).reshape(25, 2)
        labels = np.arange(25)

        split = pipeline.split(features, labels, rng)

        assert split.train_size == 22
        assert split.test_size == 3

    def test_split_is_a_permutation(self, pipeline, rng) -> None:
        """Every row lands in exactly one partition, features and labels aligned."""
        features = np.arange(40.0).reshape(20, 2)
        labels = np.arange(20)

        split = pipeline.split(features, labels, rng)
        all_labels = np.concatenate([split.train_labels, split.test_labels])

        assert sorted(all_labels.tolist()) == list(range(20))
        np.testing.assert_array_equal(split.train_features[:, 0], split.train_labels * 2.0)

    def test_split_is_reproducible_with_seed(self, pipeline) -> None:
        features = np.arange(40.0).reshape(20, 2)
        labels = np.arange(20)

        first = pipeline.split(features, labels, np.random.default_rng(5))
        second = pipeline.split(features, labels, np.random.default_rng(5))

        np.testing.assert_array_equal(first.train_labels, second.train_labels)

    def test_split_row_mismatch_raises(self, pipeline, rng) -> None:
        with pytest.raises(PreprocessingError, match="mismatch"):
            pipeline.split(np.zeros((3, 2)), np.zeros(4), rng)


class TestPreprocess:
    """Tests for the full preprocess run."""

    def test_end_to_end(self, pipeline, sample_records, rng) -> None:
        """Preprocess filters, labels and splits the corpus."""
        result = pipeline.preprocess(sample_records, rng=rng)

        assert result.records_in == 60
        assert 0 < result.records_kept < 60
        assert result.split.train_size == int(result.records_kept * 0.9)
        assert result.split.train_size + result.split.test_size == result.records_kept
        assert result.split.train_features.shape[1] == 23
        assert sum(result.class_counts.values()) == result.records_kept
        assert set(result.class_counts) <= {1, 2, 3, 4, 5}

    def test_labels_within_range(self, pipeline, sample_records, rng) -> None:
        result = pipeline.preprocess(sample_records, rng=rng)
        labels = np.concatenate([result.split.train_labels, result.split.test_labels])

        assert labels.min() >= 1
        assert labels.max() <= 5

    def test_nothing_survives_raises(self, pipeline, rng) -> None:
        """An all-incomplete corpus is an error, not an empty dataset."""
        records = [Record(price=float(i)) for i in range(10)]

        with pytest.raises(PreprocessingError, match="No records survived"):
            pipeline.preprocess(records, rng=rng)


class TestEncodeForPrediction:
    """Tests for encoding a new listing after training."""

    def test_uses_training_standardization(self, pipeline, sample_records, rng) -> None:
        """The new listing is scaled with the corpus mean and std."""
        result = pipeline.preprocess(sample_records, rng=rng)
        params = result.standardization
        listing = Record(
            bed=3.0, bath=2.0, acre_lot=0.2, zip_code=1010.0, house_size=1000.0,
            state=State.MAINE,
        )

        vector = pipeline.encode_for_prediction(listing, result)

        assert vector.shape == (23,)
        assert vector[0] == pytest.approx(params.transform("bed", 3.0))
        assert vector[4] == pytest.approx(params.transform("house_size", 1000.0))
        assert vector[5 + State.MAINE.index] == 1.0

    def test_missing_zip_uses_corpus_mean(self, pipeline, sample_records, rng) -> None:
        """A missing zip code is imputed with the corpus mean."""
        result = pipeline.preprocess(sample_records, rng=rng)
        listing = Record(bed=3.0, bath=2.0, acre_lot=0.2, house_size=1000.0)

        vector = pipeline.encode_for_prediction(listing, result)

        expected = result.standardization.transform("zip_code", result.zip_code_mean)
        assert vector[3] == pytest.approx(expected)

    def test_missing_other_field_raises(self, pipeline, sample_records, rng) -> None:
        result = pipeline.preprocess(sample_records, rng=rng)

        with pytest.raises(MissingFieldError, match="bath"):
            pipeline.encode_for_prediction(
                Record(bed=3.0, acre_lot=0.2, house_size=1000.0), result
            )
