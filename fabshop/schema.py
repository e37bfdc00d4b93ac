SCHEMA_SQL = r"""
-- Companies (tenants)
CREATE TABLE IF NOT EXISTS company (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  created_date TEXT
);

-- Employees
CREATE TABLE IF NOT EXISTS users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  company_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  email TEXT,
  is_employee INTEGER NOT NULL DEFAULT 1,
  is_admin INTEGER NOT NULL DEFAULT 0,
  created_date TEXT,
  FOREIGN KEY (company_id) REFERENCES company(id)
);

-- Customers (never shared across companies)
CREATE TABLE IF NOT EXISTS customers (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  company_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  phone TEXT,
  email TEXT,
  address TEXT,
  postal_code TEXT,
  company_name TEXT,                     -- non-empty marks a builder
  created_date TEXT,
  FOREIGN KEY (company_id) REFERENCES company(id)
);

-- Stone catalog (color / type)
CREATE TABLE IF NOT EXISTS stones (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  company_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  type TEXT,
  retail_price REAL NOT NULL DEFAULT 0,  -- per sq ft
  created_date TEXT,
  FOREIGN KEY (company_id) REFERENCES company(id)
);

-- Sales / contracts
CREATE TABLE IF NOT EXISTS sales (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  customer_id INTEGER NOT NULL,
  seller_id INTEGER,
  company_id INTEGER NOT NULL,
  sale_date TEXT NOT NULL,               -- ISO datetime
  notes TEXT,
  status TEXT NOT NULL DEFAULT 'pending', -- pending / partially cut / cut / installed / cancelled
  square_feet REAL NOT NULL DEFAULT 0,
  price REAL NOT NULL DEFAULT 0,
  project_address TEXT,
  cancelled_date TEXT,
  installed_date TEXT,
  FOREIGN KEY (customer_id) REFERENCES customers(id),
  FOREIGN KEY (seller_id) REFERENCES users(id),
  FOREIGN KEY (company_id) REFERENCES company(id)
);

-- Physical slabs. Room attributes are only set while sold.
CREATE TABLE IF NOT EXISTS slab_inventory (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  stone_id INTEGER NOT NULL,
  bundle TEXT,
  length REAL,
  width REAL,
  url TEXT,
  parent_id INTEGER,                     -- remainder of a partially sold / cut slab
  sale_id INTEGER,

  room_uuid TEXT,
  room TEXT,
  edge TEXT,
  seam TEXT,
  backsplash TEXT,
  tear_out TEXT,
  square_feet REAL,
  stove TEXT,
  ten_year_sealer INTEGER,
  waterfall TEXT,
  corbels INTEGER,
  price REAL,
  extras TEXT,                           -- JSON

  notes TEXT,
  cut_date TEXT,
  created_at TEXT,

  FOREIGN KEY (stone_id) REFERENCES stones(id),
  FOREIGN KEY (parent_id) REFERENCES slab_inventory(id),
  FOREIGN KEY (sale_id) REFERENCES sales(id)
);

CREATE INDEX IF NOT EXISTS idx_slab_sale ON slab_inventory(sale_id);
CREATE INDEX IF NOT EXISTS idx_slab_parent ON slab_inventory(parent_id);

-- Sink catalog + physical units
CREATE TABLE IF NOT EXISTS sink_type (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  company_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  type TEXT,
  retail_price REAL NOT NULL DEFAULT 0,
  url TEXT,
  FOREIGN KEY (company_id) REFERENCES company(id)
);

CREATE TABLE IF NOT EXISTS sinks (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  sink_type_id INTEGER NOT NULL,
  slab_id INTEGER,
  price REAL,                            -- captured at sale time
  is_deleted INTEGER NOT NULL DEFAULT 0, -- 1 + slab_id = consumed by a sale
  FOREIGN KEY (sink_type_id) REFERENCES sink_type(id),
  FOREIGN KEY (slab_id) REFERENCES slab_inventory(id)
);

-- Faucet catalog + physical units
CREATE TABLE IF NOT EXISTS faucet_type (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  company_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  type TEXT,
  retail_price REAL NOT NULL DEFAULT 0,
  url TEXT,
  FOREIGN KEY (company_id) REFERENCES company(id)
);

CREATE TABLE IF NOT EXISTS faucets (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  faucet_type_id INTEGER NOT NULL,
  slab_id INTEGER,
  price REAL,
  is_deleted INTEGER NOT NULL DEFAULT 0,
  FOREIGN KEY (faucet_type_id) REFERENCES faucet_type(id),
  FOREIGN KEY (slab_id) REFERENCES slab_inventory(id)
);
"""
