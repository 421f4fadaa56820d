"""
Validações de formulário (cadastro, perfil, solicitações)
"""
import re
from decimal import Decimal, InvalidOperation


class ValidationError(ValueError):
    """Erro de validação com mensagem para o usuário"""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


def only_digits(value):
    return re.sub(r'\D', '', value or '')


def validar_cpf(cpf):
    """Valida CPF pelos dígitos verificadores"""
    digits = only_digits(cpf)
    if len(digits) != 11:
        return False
    # todos iguais -> inválido
    if digits == digits[0] * 11:
        return False

    nums = [int(d) for d in digits[:9]]

    # Primeiro dígito
    s = sum(nums[i] * (10 - i) for i in range(9))
    d1 = 11 - (s % 11)
    if d1 >= 10:
        d1 = 0

    # Segundo dígito
    nums.append(d1)
    s2 = sum(nums[i] * (11 - i) for i in range(10))
    d2 = 11 - (s2 % 11)
    if d2 >= 10:
        d2 = 0

    return digits[9:] == f'{d1}{d2}'


def validar_cep(cep):
    return bool(re.fullmatch(r'\d{8}', cep or ''))


def validar_telefone(telefone, min_digits=0):
    digits = only_digits(telefone)
    return min_digits <= len(digits) <= 11


def validar_estado(estado):
    return bool(re.fullmatch(r'[A-Z]{2}', estado or ''))


def validar_email(email):
    return bool(re.fullmatch(r'[^@\s]+@[^@\s]+\.[^@\s]+', email or ''))


def parse_valor(value, field='valor'):
    """Converte '1.234,56', '1234.56' ou número em Decimal positivo"""
    if value is None or value == '':
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        raw = str(value).strip().replace('R$', '').strip()
        if ',' in raw:
            raw = raw.replace('.', '').replace(',', '.')
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise ValidationError('Valor inválido', field)
    if amount < 0:
        raise ValidationError('Valor não pode ser negativo', field)
    return amount.quantize(Decimal('0.01'))


def validate_registration(data):
    """Valida os dados de cadastro. Retorna dict normalizado."""
    nome = (data.get('nome') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not nome:
        raise ValidationError('Nome é obrigatório', 'nome')
    if not validar_email(email):
        raise ValidationError('Email inválido', 'email')
    if len(password) < 6:
        raise ValidationError('A senha deve ter pelo menos 6 caracteres!', 'password')
    if password != data.get('confirm_password', password):
        raise ValidationError('As senhas não coincidem', 'confirm_password')

    cpf = only_digits(data.get('cpf'))
    if not validar_cpf(cpf):
        raise ValidationError('CPF inválido', 'cpf')

    telefone = data.get('telefone') or ''
    if not validar_telefone(telefone):
        raise ValidationError('Telefone deve ter no máximo 11 dígitos', 'telefone')

    cep = only_digits(data.get('cep'))
    if cep and not validar_cep(cep):
        raise ValidationError('CEP deve ter 8 dígitos', 'cep')

    return {
        'nome': nome,
        'email': email,
        'password': password,
        'cpf': cpf,
        'telefone': telefone or None,
        'cep': cep or None,
    }


def validate_personal_info(data):
    """Valida a atualização de dados pessoais do trader"""
    nome = (data.get('nome') or '').strip()
    if len(nome) < 3:
        raise ValidationError('Nome deve ter no mínimo 3 caracteres', 'nome')
    if not data.get('data_nascimento'):
        raise ValidationError('Data de nascimento é obrigatória', 'data_nascimento')
    if not validar_telefone(data.get('telefone'), min_digits=10):
        raise ValidationError('Telefone deve ter no mínimo 10 dígitos', 'telefone')
    email = (data.get('email') or '').strip().lower()
    if not validar_email(email):
        raise ValidationError('Email inválido', 'email')

    cpf = data.get('cpf') or ''
    if not re.fullmatch(r'\d{11}', cpf):
        raise ValidationError('CPF deve ter 11 dígitos', 'cpf')

    endereco = (data.get('rua_bairro') or '').strip()
    if len(endereco) < 5:
        raise ValidationError('Endereço deve ter no mínimo 5 caracteres', 'rua_bairro')
    if not (data.get('numero_residencial') or '').strip():
        raise ValidationError('Número é obrigatório', 'numero_residencial')
    if not validar_cep(data.get('cep')):
        raise ValidationError('CEP deve ter 8 dígitos', 'cep')
    cidade = (data.get('cidade') or '').strip()
    if len(cidade) < 2:
        raise ValidationError('Cidade deve ter no mínimo 2 caracteres', 'cidade')
    if not validar_estado(data.get('estado')):
        raise ValidationError('Estado deve conter apenas letras maiúsculas', 'estado')

    return {
        'nome': nome,
        'data_nascimento': data.get('data_nascimento'),
        'telefone': data.get('telefone'),
        'email': email,
        'cpf': cpf,
        'rua_bairro': endereco,
        'numero_residencial': data.get('numero_residencial').strip(),
        'cep': data.get('cep'),
        'cidade': cidade,
        'estado': data.get('estado'),
    }
