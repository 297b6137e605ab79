from django.core.exceptions import ValidationError
import re


def validar_forca_senha(senha):
    """
    Valida a senha do usuário:
    - Mínimo 8 caracteres
    """
    if len(senha) < 8:
        raise ValidationError('Senha deve ter no mínimo 8 caracteres.')


def validar_username(username):
    """Nome de usuário: mínimo 3 caracteres, apenas letras, números e _"""
    if len(username) < 3:
        raise ValidationError('Nome de usuário deve ter no mínimo 3 caracteres.')

    if not re.match(r'^[a-zA-Z0-9_]+$', username):
        raise ValidationError('Nome de usuário deve conter apenas letras, números e _.')


def validar_telefone_usuario(telefone):
    """Telefone no formato (00) 0000-0000 ou (00) 00000-0000"""
    if not re.match(r'^\(\d{2}\)\s\d{4,5}-\d{4}$', telefone):
        raise ValidationError('Telefone deve estar no formato (00) 00000-0000.')
