from datetime import datetime
from flask import jsonify, request


def get_payload():
    """Dados do corpo da requisição, JSON ou formulário"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def json_error(message, status=400, **extra):
    return jsonify({'error': message, **extra}), status


def parse_date_arg(name):
    """Lê um parâmetro de query no formato AAAA-MM-DD; None se ausente ou inválido"""
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return None
