from abc import ABC, abstractmethod
from collections.abc import Iterator

from polarlight.domain.entities.tensor import Tensor


class Module(ABC):
    """Abstract interface for network modules.

    Modules never mutate the tensors they are given; ``forward`` returns a
    new tensor.
    """

    module_name: str = "Module"

    @abstractmethod
    def forward(self, inputs: Tensor) -> Tensor:
        """
        Apply the module to `inputs`.

        Parameters
        ----------
        inputs : Tensor
            Input tensor; not modified.

        Returns
        -------
        Tensor
            Output tensor.
        """
        pass

    def parameters(self) -> Iterator[Tensor]:
        """Yield the tensors owned by this module (none by default)."""
        yield from ()

    def __call__(self, inputs: Tensor) -> Tensor:
        return self.forward(inputs)
