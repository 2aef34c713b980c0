# ==============================================================================
# app/sheets/errors.py
# ------------------------------------------------------------------------------
# Exceptions raised by the spreadsheet layer. Each one carries the short
# title and the HTTP status the JSON API answers with.
# ==============================================================================


class SheetsError(Exception):
    """Base error for anything that goes wrong talking to the spreadsheet."""
    title = 'Erro ao processar requisição'
    status_code = 500

    def __init__(self, message, title=None):
        super().__init__(message)
        self.message = message
        if title:
            self.title = title

    def to_dict(self):
        return {'error': self.title, 'message': self.message}


class SheetsConfigError(SheetsError):
    """Missing environment variables or unusable service account credentials."""
    title = 'Configuração incompleta'


class DataError(SheetsError):
    """The sheet was read but lacks the columns the dashboards need."""
    title = 'Dados inválidos'


class InvalidRequest(SheetsError):
    title = 'Dados inválidos'
    status_code = 400


class NotFound(SheetsError):
    title = 'Registro não encontrado'
    status_code = 404
