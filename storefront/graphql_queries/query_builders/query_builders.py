from jinja2 import Environment, FileSystemLoader
import os

class GraphQLQueryBuilder:
    def __init__(self, template_filename):
        base_dir = os.path.dirname(os.path.dirname(__file__))  # /graphql_queries/
        template_dir = os.path.join(base_dir, 'templates')
        self.env = Environment(loader=FileSystemLoader(template_dir))
        self.template = self.env.get_template(template_filename)

    def render(self, **kwargs):
        return self.template.render(**kwargs)

class ProductsQueryBuilder(GraphQLQueryBuilder):
    def __init__(self):
        super().__init__("get_products.graphql.j2")

    def build(self, include_images=True, variants_limit=10, images_limit=5):
        return self.render(
            include_images=include_images,
            variants_limit=variants_limit,
            images_limit=images_limit
        )

class CustomerQueryBuilder(GraphQLQueryBuilder):
    def __init__(self):
        super().__init__("get_customer.graphql.j2")

    def build(self, addresses_limit=10, orders_limit=10, line_items_limit=10):
        return self.render(
            addresses_limit=addresses_limit,
            orders_limit=orders_limit,
            line_items_limit=line_items_limit
        )

class CustomerCreateMutationBuilder(GraphQLQueryBuilder):
    def __init__(self):
        super().__init__("customer_create.graphql.j2")

    def build(self):
        return self.render()

class CustomerAccessTokenCreateMutationBuilder(GraphQLQueryBuilder):
    def __init__(self):
        super().__init__("customer_access_token_create.graphql.j2")

    def build(self):
        return self.render()

class CustomerRecoverMutationBuilder(GraphQLQueryBuilder):
    def __init__(self):
        super().__init__("customer_recover.graphql.j2")

    def build(self):
        return self.render()
