"""
User-facing response messages.

The catalog front-end is French-speaking; every error and confirmation
message returned by the API comes from here.
"""


class Messages:
    LIST_FAILED = "Une erreur est survenue lors du chargement des catégories."
    FETCH_FAILED = "Une erreur est survenue lors du chargement de la catégorie."
    CREATE_FAILED = "Une erreur est survenue lors de la création de la catégorie."
    UPDATE_FAILED = "Une erreur est survenue lors de la mise à jour de la catégorie."
    DELETE_FAILED = "Une erreur est survenue lors de la suppression de la catégorie."

    NAME_REQUIRED = "Le nom de la catégorie est requis."
    INVALID_REQUEST = "La requête est invalide."
    INVALID_IMAGE = "Le fichier fourni n'est pas une image valide."
    IMAGE_TOO_LARGE = "L'image dépasse la taille maximale autorisée ({max_size} octets)."
    IMAGE_TYPE_NOT_ALLOWED = "Type d'image non autorisé : {content_type}."

    INTERNAL_ERROR = "Une erreur interne est survenue."

    CATEGORY_NOT_FOUND = "Catégorie introuvable."
    CATEGORY_DELETED = "La catégorie a été supprimée avec succès."

    ACCESS_DENIED = "Accès refusé : authentification requise."
    INVALID_TOKEN = "Accès refusé : jeton invalide."
