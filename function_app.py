import azure.functions as func

from catalog_similarity_service.blueprints.similar_items_bp import bp as similar_items_bp

app = func.FunctionApp()

app.register_blueprint(similar_items_bp)
