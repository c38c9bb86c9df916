"""Common testing utilities."""

import jax
from sklearn.datasets import make_classification, make_regression
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import MinMaxScaler, StandardScaler

# Eight labeled points in the plane; the three closest to the origin are A, B and C
EXAMPLE_POINTS = [
    ((0.0, 5.0), "A"),
    ((5.0, 0.0), "B"),
    ((5.0, 2.0), "C"),
    ((1.0, 8.0), "D"),
    ((1.0, 20.0), "E"),
    ((90.0, 2.5), "F"),
    ((10.0, 2.1), "G"),
    ((1.3, 25.8), "H"),
]


def random_points(n_points: int, dimension: int, seed: int = 0, scale: float = 100.0):
    """Return uniformly random points labeled by their index.

    Args:
        n_points: Number of points.
        dimension: Number of coordinates per point.
        seed: Random seed.
        scale: Side length of the cube the points are drawn from.

    Returns:
        A list of (coordinate, index) pairs.
    """
    coordinates = scale * jax.random.uniform(
        jax.random.PRNGKey(seed), (n_points, dimension)
    )
    return [(tuple(row), index) for index, row in enumerate(coordinates.tolist())]


def regression_dataset(
    n_samples: int = 400,
    split_size: float = 0.25,
    n_features: int = 2,
    noise: int = 5,
    seed: int = 1,
    shuffle=False,
):
    """Return a regression dataset.

    Args:
        n_samples: Number of samples.
        split_size: Test split size.
        n_features: Number of features.
        noise: Noise level.
        seed: Random seed.
        shuffle: Shuffle the data.

    Returns:
        X_train: Training data.
        X_test: Test data.
        y_train: Training target.
        y_test: Test target.
    """
    X, y = make_regression(  # type: ignore broken types
        n_samples=n_samples, n_features=n_features, noise=noise, random_state=seed
    )

    data_scaler = StandardScaler()
    target_scaler = MinMaxScaler()

    X = data_scaler.fit_transform(X)
    y = target_scaler.fit_transform(y.reshape(-1, 1))
    y = y.reshape(-1)

    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=split_size, shuffle=shuffle
    )

    return X_train, X_test, y_train, y_test


def classification_dataset(
    n_samples: int = 400,
    split_size: float = 0.25,
    n_features: int = 4,
    seed: int = 1,
    shuffle=False,
):
    """Return a classification dataset.

    Args:
        n_samples: Number of samples.
        split_size: Test split size.
        n_features: Number of features.
        seed: Random seed.
        shuffle: Shuffle the data.

    Returns:
        X_train: Training data.
        X_test: Test data.
        y_train: Training target.
        y_test: Test target.
    """
    X, y = make_classification(
        n_samples=n_samples,
        n_features=n_features,
        n_informative=2,
        n_redundant=0,
        class_sep=2.0,
        random_state=seed,
    )

    data_scaler = StandardScaler()

    X = data_scaler.fit_transform(X)

    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=split_size, shuffle=shuffle
    )

    return X_train, X_test, y_train, y_test
