# Importar todos os models
from .profile import Profile, UserRole
from .plan import Plano, PlanoAdquirido, WalletCounter
from .solicitacao import Solicitacao
from .historico import HistoricoObservacao
from .document import UserDocument
from .platform import PlatformConfig, SystemLog

__all__ = ['Profile', 'UserRole', 'Plano', 'PlanoAdquirido', 'WalletCounter', 'Solicitacao',
           'HistoricoObservacao', 'UserDocument', 'PlatformConfig', 'SystemLog']
