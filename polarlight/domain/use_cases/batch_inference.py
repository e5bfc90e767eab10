import logging
from dataclasses import dataclass

from polarlight.domain.entities.dataloader import DataLoader
from polarlight.domain.entities.tensor import Tensor
from polarlight.domain.interfaces.dataset_loader import DatasetLoader
from polarlight.domain.interfaces.module import Module

logger = logging.getLogger(__name__)


@dataclass
class InferenceResult:
    """Result of running a module over one dataset split."""

    split: str
    num_samples: int
    num_batches: int
    predictions: list[int]
    accuracy: float


def argmax_rows(outputs: Tensor) -> list[int]:
    """
    Index of the largest value in each row of a rank-2 tensor.

    Parameters
    ----------
    outputs : Tensor
        Shape ``[batch, classes]``.

    Returns
    -------
    list[int]
        One class index per row; ties resolve to the lowest index.
    """
    rows, cols = outputs.shape
    predictions = []
    for row in range(rows):
        values = [outputs.get((row, col)) for col in range(cols)]
        predictions.append(max(range(cols), key=values.__getitem__))
    return predictions


class BatchInference:
    """
    Runs a module over a dataset split in batches and scores its predictions.
    """

    def __init__(
        self,
        split: str,
        max_samples: int | None,
        batch_size: int,
        dataset_loader: DatasetLoader,
        model: Module,
        shuffle: bool = False,
        seed: int | None = None,
    ):
        """
        Create a BatchInference use case.

        Parameters
        ----------
        split : str
            Dataset split to evaluate.
        max_samples : int | None
            Maximum number of samples to load, or None to use all samples.
        batch_size : int
            Number of samples per forward pass.
        dataset_loader : DatasetLoader
            Component responsible for loading the dataset.
        model : Module
            Module mapping ``[batch, features]`` inputs to ``[batch, classes]`` scores.
        shuffle : bool
            Visit samples in a seeded random order.
        seed : int | None
            Seed for the shuffle order.
        """
        self.split = split
        self.max_samples = max_samples
        self.batch_size = batch_size
        self.dataset_loader = dataset_loader
        self.model = model
        self.shuffle = shuffle
        self.seed = seed

    def run(self) -> InferenceResult:
        """
        Load the split, flatten each batch to ``[batch, -1]``, run the model
        and compare the arg-max of each output row with the labels.

        Returns
        -------
        InferenceResult
            Predictions and accuracy over every processed sample.
        """
        logger.info(f"Loading {self.split} split...")
        dataset = self.dataset_loader.load(self.split, self.max_samples)
        loader = DataLoader(
            dataset,
            batch_size=self.batch_size,
            shuffle=self.shuffle,
            seed=self.seed,
        )
        logger.info(f"Running inference on {len(dataset)} samples in {len(loader)} batches")

        predictions: list[int] = []
        correct = 0
        for batch_index, (inputs, labels) in enumerate(loader):
            flat = inputs.reshape([inputs.shape[0], -1])
            outputs = self.model(flat)
            batch_predictions = argmax_rows(outputs)
            correct += sum(
                int(predicted == label)
                for predicted, label in zip(batch_predictions, labels.components)
            )
            predictions.extend(batch_predictions)
            logger.debug(f"Batch {batch_index}: outputs {list(outputs.shape)}")

        accuracy = correct / len(predictions) if predictions else 0.0
        logger.info(f"Accuracy on {self.split}: {accuracy:.4f}")
        return InferenceResult(
            split=self.split,
            num_samples=len(predictions),
            num_batches=len(loader),
            predictions=predictions,
            accuracy=accuracy,
        )
