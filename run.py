from app import create_app, db
import os

app = create_app()

@app.shell_context_processor
def make_shell_context():
    # Importar models aqui para evitar importação circular
    from app.models import Profile, UserRole, Plano, PlanoAdquirido, Solicitacao, HistoricoObservacao

    return {
        'db': db,
        'Profile': Profile,
        'UserRole': UserRole,
        'Plano': Plano,
        'PlanoAdquirido': PlanoAdquirido,
        'Solicitacao': Solicitacao,
        'HistoricoObservacao': HistoricoObservacao,
    }

if __name__ == '__main__':
    with app.app_context():
        print(f"Banco de dados: {app.config['SQLALCHEMY_DATABASE_URI']}")

        db.create_all()
        print("Banco de dados criado/atualizado")

    debug = os.environ.get('FLASK_DEBUG', 'False').lower() in ['true', '1', 'on']
    print(f"TraderHub rodando em http://localhost:5000 (debug={debug})")
    app.run(debug=debug, host='0.0.0.0', port=5000)
