__version__ = "0.1.0"
__title__ = "zkcp"
__author__ = "zkcp contributors"
__email__ = "zkcp@users.noreply.github.com"
__url__ = "https://github.com/zkcp/zkcp"
__license__ = "MIT"
__description__ = "Chaum-Pedersen zero-knowledge proofs for password-less authentication."
__copyright__ = "2024, zkcp contributors"


from zkcp.group import GroupParameters
from zkcp.generator import generate, MaterialApplication
from zkcp.protocol import ProtocolState
from zkcp.prover import Prover
from zkcp.verifier import VerifierApplication
