from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "categories" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "name" VARCHAR(100) NOT NULL UNIQUE
);
CREATE INDEX IF NOT EXISTS "idx_categories_public__5a1e1b" ON "categories" ("public_id");
CREATE TABLE IF NOT EXISTS "products" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "name" VARCHAR(255) NOT NULL,
    "price" VARCHAR(40) NOT NULL DEFAULT 0,
    "category_id" INT NOT NULL REFERENCES "categories" ("id") ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS "idx_products_public__9d2c41" ON "products" ("public_id");
CREATE TABLE IF NOT EXISTS "customers" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "name" VARCHAR(255) NOT NULL,
    "email" VARCHAR(255) NOT NULL UNIQUE,
    "phone" VARCHAR(50),
    "address" TEXT
);
CREATE INDEX IF NOT EXISTS "idx_customers_public__0e7b3d" ON "customers" ("public_id");
CREATE TABLE IF NOT EXISTS "invoices" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "invoice" VARCHAR(50) NOT NULL UNIQUE /* Invoice code shown to customers */,
    "grand_total" VARCHAR(40) NOT NULL,
    "status" VARCHAR(20) NOT NULL DEFAULT 'pending' /* PENDING: pending\nSUCCESS: success\nEXPIRED: expired\nFAILED: failed */,
    "customer_id" INT NOT NULL REFERENCES "customers" ("id") ON DELETE RESTRICT
);
CREATE INDEX IF NOT EXISTS "idx_invoices_public__6f0a92" ON "invoices" ("public_id");
CREATE TABLE IF NOT EXISTS "invoice_details" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "qty" INT NOT NULL,
    "price" VARCHAR(40) NOT NULL /* Unit price at the time of purchase */,
    "invoice_id" INT NOT NULL REFERENCES "invoices" ("id") ON DELETE CASCADE,
    "product_id" INT NOT NULL REFERENCES "products" ("id") ON DELETE RESTRICT,
    CONSTRAINT "uid_invoice_det_invoice_4b8e11" UNIQUE ("invoice_id", "product_id")
);
CREATE INDEX IF NOT EXISTS "idx_invoice_det_public__c3d7f0" ON "invoice_details" ("public_id");
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSON NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        """
