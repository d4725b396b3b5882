from backoffice.infrastructure.database.models.artist import ArtistModel
from backoffice.infrastructure.database.models.language import LanguageModel
from backoffice.infrastructure.database.models.presale_artwork import PresaleArtworkModel
from backoffice.infrastructure.database.models.translation import TranslationModel

__all__ = [
    "ArtistModel",
    "LanguageModel",
    "PresaleArtworkModel",
    "TranslationModel",
]
